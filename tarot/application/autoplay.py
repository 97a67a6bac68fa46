"""
自动游戏控制器

无需逐回合确认地连续进行回合。一次会话以快速模式最多进行 ``rounds_target``
个回合，并在第一个满足以下任一条件的回合边界结束：已请求停止、达到目标回合数、
下注额不再可负担。会话结束后速度恢复为开始前的设置。
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional, Protocol

from ..core.economy.economy import Economy
from ..core.events.domain_events import DomainEvent, EventType
from ..core.state_machine.types import RoundContext, RoundPhase, SpeedMode
from .types import CommandResult

__all__ = ['AutoPlaySession', 'AutoPlayDecision', 'AutoPlayController']

logger = logging.getLogger(__name__)


@dataclass
class AutoPlaySession:
    """一次自动游戏的状态"""
    rounds_target: int
    rounds_remaining: int
    speed_before_auto_play: SpeedMode
    active: bool = True
    stop_requested: bool = False
    rounds_played: int = 0
    finish_reason: Optional[str] = None

    def __post_init__(self):
        if self.rounds_target < 1:
            raise ValueError(f"rounds_target must be at least 1, got {self.rounds_target}")
        if not 0 <= self.rounds_remaining <= self.rounds_target:
            raise ValueError(f"rounds_remaining {self.rounds_remaining} outside [0, {self.rounds_target}]")


class AutoPlayDecision(Enum):
    """回合边界上的处理结果"""
    INACTIVE = auto()
    CONTINUE = auto()
    FINISHED = auto()


class AutoPlayHost(Protocol):
    """控制器驱动的回合引擎接口"""

    @property
    def context(self) -> RoundContext:
        ...

    @property
    def economy(self) -> Economy:
        ...

    def begin_round(self) -> None:
        ...

    def reveal_slot(self, slot: int) -> None:
        ...

    def set_speed(self, speed: SpeedMode) -> None:
        ...

    def set_status(self, message: str) -> None:
        ...

    def publish(self, event_type: EventType, data: Dict[str, Any]) -> DomainEvent:
        ...


class AutoPlayController:
    """
    驱动回合引擎完成一次自动游戏会话

    控制器从不直接操作经济系统：只检查可负担性，并请求引擎开始回合和翻牌。
    翻牌按顺序进行，先位置0，再1，再2，每张都在上一张翻牌动画结束后。
    """

    def __init__(self, host: AutoPlayHost, rounds_target: int = 10):
        if rounds_target < 1:
            raise ValueError(f"rounds_target must be at least 1, got {rounds_target}")
        self._host = host
        self._rounds_target = rounds_target
        self._session: Optional[AutoPlaySession] = None
        self._last_session: Optional[AutoPlaySession] = None

    @property
    def rounds_target(self) -> int:
        return self._rounds_target

    @property
    def session(self) -> Optional[AutoPlaySession]:
        return self._session

    @property
    def last_session(self) -> Optional[AutoPlaySession]:
        """最近一次结束的会话"""
        return self._last_session

    @property
    def is_active(self) -> bool:
        return self._session is not None and self._session.active

    @property
    def rounds_remaining(self) -> int:
        return self._session.rounds_remaining if self._session else 0

    @property
    def stop_requested(self) -> bool:
        return bool(self._session and self._session.stop_requested)

    def toggle(self) -> CommandResult:
        """未运行时开始，否则请求正在运行的会话停止"""
        if self.is_active:
            return self.request_stop()
        return self.start()

    def start(self) -> CommandResult:
        """
        开始一次会话及其第一个回合

        Returns:
            CommandResult: 不在空闲阶段或已在运行时为校验错误；
            下注额不可负担时为业务规则违反。
        """
        ctx = self._host.context
        if self.is_active:
            return CommandResult.validation_error("auto-play already running", "AUTO_PLAY_ACTIVE")
        if ctx.current_phase is not RoundPhase.IDLE:
            return CommandResult.validation_error(
                f"auto-play can only start while idle, phase is {ctx.current_phase.name}", "NOT_IDLE")
        if not self._host.economy.can_start_round():
            self._host.set_status("Insufficient balance for auto-play")
            logger.info("[AutoPlay] start refused: insufficient balance")
            return CommandResult.business_rule_violation(
                "Insufficient balance for auto-play", "INSUFFICIENT_BALANCE")

        self._session = AutoPlaySession(
            rounds_target=self._rounds_target,
            rounds_remaining=self._rounds_target,
            speed_before_auto_play=ctx.speed,
        )
        ctx.auto_play_active = True
        self._host.set_speed(SpeedMode.FAST)
        self._host.publish(EventType.AUTO_PLAY_STARTED, {
            'rounds_target': self._rounds_target,
            'speed_before': self._session.speed_before_auto_play.value,
        })
        self._host.set_status(f"Auto-play: {self._rounds_target} rounds (Fast)")
        logger.info(f"[AutoPlay] started, {self._rounds_target} rounds")

        self._launch_round()
        return CommandResult.success_result("auto-play started", {'rounds_target': self._rounds_target})

    def request_stop(self) -> CommandResult:
        """当前进行中的回合结算后停止"""
        if not self.is_active:
            return CommandResult.validation_error("auto-play is not running", "AUTO_PLAY_INACTIVE")
        if self._session.stop_requested:
            return CommandResult.success_result("stop already requested")

        self._session.stop_requested = True
        self._host.publish(EventType.AUTO_PLAY_STOP_REQUESTED, {
            'rounds_played': self._session.rounds_played,
            'rounds_remaining': self._session.rounds_remaining,
        })
        self._host.set_status("Auto-play: will stop after this round")
        logger.info("[AutoPlay] stop requested")
        return CommandResult.success_result("auto-play will stop after this round")

    def on_reveal_phase_entered(self) -> None:
        """翻开自动回合的第一张卡牌"""
        if not self.is_active:
            return
        self._reveal_next()

    def on_flip_complete(self) -> None:
        """上一张翻牌结束后翻开下一张"""
        if not self.is_active:
            return
        ctx = self._host.context
        if ctx.current_phase is not RoundPhase.REVEAL:
            return
        self._reveal_next()

    def on_round_complete(self) -> AutoPlayDecision:
        """
        回合边界：结束会话或开始下一回合

        Returns:
            AutoPlayDecision: 没有运行中的会话时为 INACTIVE；会话在此结束时为
            FINISHED（引擎随后进入空闲阶段）；下一回合已开始时为 CONTINUE。
        """
        if not self.is_active:
            return AutoPlayDecision.INACTIVE

        session = self._session
        if session.stop_requested:
            reason = "stop requested"
        elif session.rounds_remaining <= 0:
            reason = "round target reached"
        elif not self._host.economy.can_start_round():
            reason = "insufficient balance"
        else:
            reason = None

        if reason is not None:
            self._finish(reason)
            return AutoPlayDecision.FINISHED

        self._launch_round()
        return AutoPlayDecision.CONTINUE

    def _launch_round(self) -> None:
        session = self._session
        session.rounds_remaining -= 1
        session.rounds_played += 1
        logger.debug(f"[AutoPlay] round {session.rounds_played}/{session.rounds_target}")
        self._host.begin_round()
        self._host.set_status(f"Auto-play: {session.rounds_remaining} rounds left")

    def _reveal_next(self) -> None:
        current_round = self._host.context.current_round
        if current_round is None:
            return
        slot = current_round.next_unrevealed_slot()
        if slot is not None:
            self._host.reveal_slot(slot)

    def _finish(self, reason: str) -> None:
        session = self._session
        session.active = False
        session.finish_reason = reason
        self._host.context.auto_play_active = False
        self._host.set_speed(session.speed_before_auto_play)
        self._host.publish(EventType.AUTO_PLAY_FINISHED, {
            'reason': reason,
            'rounds_played': session.rounds_played,
        })
        self._host.set_status("Auto-play finished")
        logger.info(f"[AutoPlay] finished after {session.rounds_played} rounds: {reason}")
        self._last_session = session
        self._session = None
