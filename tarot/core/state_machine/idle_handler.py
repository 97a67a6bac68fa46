"""
空闲阶段处理器
"""
from typing import Dict, Any

from .types import RoundPhase, RoundContext, IntentType, PhaseEvent
from .base_phase_handler import BasePhaseHandler

__all__ = ['IdleHandler']


class IdleHandler(BasePhaseHandler):
    """等待玩家操作；唯一可以调整下注额的阶段"""

    def __init__(self):
        super().__init__(RoundPhase.IDLE)

    def on_enter(self, ctx: RoundContext) -> None:
        super().on_enter(ctx)
        ctx.current_round = None

    def handle_intent(self, ctx: RoundContext, intent: IntentType, data: Dict[str, Any]) -> PhaseEvent:
        if intent in (IntentType.ADJUST_BET, IntentType.START_ROUND):
            if ctx.auto_play_active:
                return self.reject(f"{intent.value} disabled during auto-play")
            return self.accept(intent, data)
        if intent is IntentType.TOGGLE_AUTO_PLAY:
            return self.accept(intent, data)
        return super().handle_intent(ctx, intent, data)
