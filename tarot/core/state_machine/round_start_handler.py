"""
回合开始阶段处理器
"""
from .types import RoundPhase, RoundContext
from .base_phase_handler import BasePhaseHandler

__all__ = ['RoundStartHandler']


class RoundStartHandler(BasePhaseHandler):
    """押注已提交，卡牌背面朝上发出；等待入场动画"""

    def __init__(self):
        super().__init__(RoundPhase.ROUND_START)

    def can_transition_to(self, target_phase: RoundPhase, ctx: RoundContext) -> bool:
        return super().can_transition_to(target_phase, ctx) and ctx.current_round is not None
