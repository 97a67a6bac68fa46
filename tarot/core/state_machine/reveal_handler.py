"""
翻牌阶段处理器
"""
from typing import Dict, Any

from .types import RoundPhase, RoundContext, IntentType, PhaseEvent
from .base_phase_handler import BasePhaseHandler

__all__ = ['RevealHandler']


class RevealHandler(BasePhaseHandler):
    """
    逐张翻开卡牌

    手动游戏时可按任意顺序选择任一未翻开的位置。自动游戏期间
    由引擎自行翻牌，翻牌意图会被拒绝。
    """

    def __init__(self):
        super().__init__(RoundPhase.REVEAL)

    def handle_intent(self, ctx: RoundContext, intent: IntentType, data: Dict[str, Any]) -> PhaseEvent:
        if intent is not IntentType.REVEAL:
            return super().handle_intent(ctx, intent, data)

        if ctx.auto_play_active:
            return self.reject("cards are revealed automatically during auto-play")

        current_round = ctx.current_round
        slot = data.get('slot')
        if current_round is None:
            return self.reject("no round in progress")
        if not current_round.is_valid_slot(slot):
            return self.reject(f"slot {slot!r} out of range")
        if current_round.is_revealed(slot):
            return self.reject(f"slot {slot} already revealed")
        return self.accept(intent, data)

    def can_transition_to(self, target_phase: RoundPhase, ctx: RoundContext) -> bool:
        if not super().can_transition_to(target_phase, ctx):
            return False
        return ctx.current_round is not None and ctx.current_round.is_complete
