"""
结果阶段处理器
"""
from .types import RoundPhase, RoundContext
from .base_phase_handler import BasePhaseHandler

__all__ = ['ResultHandler']


class ResultHandler(BasePhaseHandler):
    """回合已结算；结果在显示窗口结束前保持在屏幕上"""

    def __init__(self):
        super().__init__(RoundPhase.RESULT)

    def on_enter(self, ctx: RoundContext) -> None:
        super().on_enter(ctx)
        ctx.rounds_completed += 1

    def can_transition_to(self, target_phase: RoundPhase, ctx: RoundContext) -> bool:
        if not super().can_transition_to(target_phase, ctx):
            return False
        # 跳过可见的空闲阶段仅用于自动游戏连续回合
        if target_phase is RoundPhase.ROUND_START:
            return ctx.auto_play_active
        return True
