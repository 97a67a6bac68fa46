"""
回合状态机
"""
import logging
import time
from typing import Any, Dict, List, Optional

from ..exceptions import PhaseTransitionError
from .types import RoundPhase, PhaseEvent, RoundContext, PhaseHandler, IntentType

__all__ = ['RoundStateMachine']

logger = logging.getLogger(__name__)

REQUIRED_PHASES = frozenset(RoundPhase)


class RoundStateMachine:
    """通过阶段处理器驱动 Idle -> RoundStart -> Reveal -> Result"""

    def __init__(self, phases: Dict[RoundPhase, PhaseHandler]):
        """
        初始化状态机

        Args:
            phases: 每个阶段的处理器

        Raises:
            ValueError: 某个阶段没有处理器
        """
        if not phases:
            raise ValueError("phases cannot be empty")

        missing_phases = REQUIRED_PHASES - set(phases.keys())
        if missing_phases:
            raise ValueError(f"missing phase handlers: {sorted(p.name for p in missing_phases)}")

        self._phases = phases
        self._current_phase = RoundPhase.IDLE
        self._transition_history: List[Dict[str, Any]] = []

    @property
    def current_phase(self) -> RoundPhase:
        return self._current_phase

    @property
    def transition_history(self) -> List[Dict[str, Any]]:
        return self._transition_history.copy()

    def get_handler(self, phase: Optional[RoundPhase] = None) -> PhaseHandler:
        """``phase`` 的处理器，省略时为当前阶段的处理器"""
        if phase is None:
            phase = self._current_phase
        return self._phases[phase]

    def can_transition_to(self, target_phase: RoundPhase, ctx: RoundContext) -> bool:
        return self.get_handler().can_transition_to(target_phase, ctx)

    def transition_to(self, target_phase: RoundPhase, ctx: RoundContext, event: PhaseEvent) -> None:
        """
        转换到 ``target_phase``

        Args:
            target_phase: 要进入的阶段
            ctx: 回合上下文
            event: 触发转换的事件

        Raises:
            PhaseTransitionError: 当前处理器拒绝该转换
        """
        current_handler = self.get_handler()

        if not current_handler.can_transition_to(target_phase, ctx):
            raise PhaseTransitionError(
                f"cannot move from {self._current_phase.name} to {target_phase.name}")

        current_handler.on_exit(ctx)

        old_phase = self._current_phase
        self._current_phase = target_phase
        ctx.current_phase = target_phase
        ctx.last_event = event

        self.get_handler().on_enter(ctx)

        self._transition_history.append({
            'from': old_phase,
            'to': target_phase,
            'event': event,
            'timestamp': time.time()
        })
        logger.debug(f"[Round] {old_phase.name} -> {target_phase.name} ({event.event_type})")

    def handle_intent(self, ctx: RoundContext, intent: IntentType, data: Optional[Dict[str, Any]] = None) -> PhaseEvent:
        """
        询问当前阶段是否接受某个意图

        意图本身由引擎执行；状态机只回答接受或拒绝。
        """
        return self.get_handler().handle_intent(ctx, intent, data or {})

    def reset(self, ctx: Optional[RoundContext] = None) -> None:
        """回到 IDLE 并清空历史"""
        self._current_phase = RoundPhase.IDLE
        self._transition_history.clear()
        if ctx is not None:
            ctx.current_phase = RoundPhase.IDLE
            ctx.current_round = None
