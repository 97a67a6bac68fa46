"""
阶段处理器基类
"""
import logging
from typing import Any, Dict, List

from .types import RoundPhase, RoundContext, IntentType, PhaseEvent

__all__ = ['BasePhaseHandler', 'VALID_TRANSITIONS']

logger = logging.getLogger(__name__)

VALID_TRANSITIONS: Dict[RoundPhase, List[RoundPhase]] = {
    RoundPhase.IDLE: [RoundPhase.ROUND_START],
    RoundPhase.ROUND_START: [RoundPhase.REVEAL],
    RoundPhase.REVEAL: [RoundPhase.RESULT],
    RoundPhase.RESULT: [RoundPhase.IDLE, RoundPhase.ROUND_START],
}


class BasePhaseHandler:
    """
    所有阶段共用的行为

    空闲阶段之外只有两种意图可能有意义：切换速度（仅手动游戏）以及
    请求正在运行的自动游戏停止的自动游戏开关。
    子类通过扩展 ``handle_intent`` 处理各自的意图。
    """

    def __init__(self, phase: RoundPhase):
        self.phase = phase

    def on_enter(self, ctx: RoundContext) -> None:
        logger.info(f"[Round] entering phase: {self.phase.name}")

    def on_exit(self, ctx: RoundContext) -> None:
        logger.info(f"[Round] leaving phase: {self.phase.name}")

    def can_transition_to(self, target_phase: RoundPhase, ctx: RoundContext) -> bool:
        return target_phase in VALID_TRANSITIONS.get(self.phase, [])

    def handle_intent(self, ctx: RoundContext, intent: IntentType, data: Dict[str, Any]) -> PhaseEvent:
        if intent is IntentType.TOGGLE_SPEED:
            if ctx.auto_play_active:
                return self.reject("speed is fixed during auto-play")
            return self.accept(intent, data)
        if intent is IntentType.TOGGLE_AUTO_PLAY and ctx.auto_play_active:
            return self.accept(intent, data)
        return self.reject(f"{intent.value} not accepted during {self.phase.name}")

    def accept(self, intent: IntentType, data: Dict[str, Any]) -> PhaseEvent:
        return PhaseEvent("INTENT_ACCEPTED", dict(data, intent=intent.value), self.phase)

    def reject(self, reason: str) -> PhaseEvent:
        return PhaseEvent("INVALID_INTENT", {"reason": reason}, self.phase)
