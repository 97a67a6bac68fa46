"""
回合引擎

管理一张牌桌：经济系统、回合状态机与自动游戏控制器。用户意图和表现层完成回调
通过 ``on_*`` 方法进入，并逐个处理：处理某个事件期间到达的任何调用
（例如在请求内部同步完成的表现层）都会排队并在之后执行，
因此处理器不会被重入。

表现层请求携带请求ID。完成回调只会被处理一次，且仅在其所属回合仍为当前回合时；
过期或重复的完成回调记录日志后丢弃。
"""

import itertools
import logging
import random
import uuid
from collections import deque
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from ..core.economy.economy import Economy
from ..core.economy.money import MoneyLike, format_money, to_money
from ..core.events.domain_events import (
    CardRevealedEvent,
    DomainEvent,
    EventType,
    IntentRejectedEvent,
    PhaseChangedEvent,
    RoundSettledEvent,
    RoundStartedEvent,
    StatusMessageEvent,
)
from ..core.events.event_bus import EventBus, get_event_bus
from ..core.exceptions import PhaseTransitionError
from ..core.multipliers.loader import load_default_table, load_table_from_file
from ..core.multipliers.selector import MultiplierSource, WeightedSelector
from ..core.multipliers.types import MultiplierTable, get_rarity
from ..core.persistence.types import PersistenceGateway
from ..core.rules.payout import settle
from ..core.state_machine.round_state_machine import RoundStateMachine
from ..core.state_machine.state_machine_factory import StateMachineFactory
from ..core.state_machine.types import (
    SLOT_COUNT,
    IntentType,
    PhaseEvent,
    Round,
    RoundContext,
    RoundPhase,
    SpeedMode,
)
from .autoplay import AutoPlayController, AutoPlayDecision
from .config_service import EngineConfig
from .dto import EngineSnapshot, RoundResult
from .presentation import (
    EntranceRequest,
    FlipRequest,
    ImmediatePresentation,
    PresentationGateway,
    ResultDisplayRequest,
)
from .types import CommandResult

__all__ = ['RoundEngine', 'IDLE_STATUS']

logger = logging.getLogger(__name__)

IDLE_STATUS = "Idle – adjust bet and press Play"


class _RequestKind(Enum):
    ENTRANCE = "entrance"
    FLIP = "flip"
    RESULT = "result"


@dataclass(frozen=True)
class _PendingRequest:
    kind: _RequestKind
    round_id: str
    slot: Optional[int] = None
    is_final: bool = False


class RoundEngine:
    """
    三卡回合引擎

    Args:
        table: 抽取卡牌的倍率表
        economy: 下注额/余额的持有者
        presentation: 接收动画与结果请求的前端
        config: 引擎常量
        selector: 倍率来源；默认为基于 ``table``、共享 ``rng`` 的 WeightedSelector
        rng: 用于抽取和位置洗牌的随机数生成器
        event_bus: 发布状态变化的事件总线
        state_machine: 回合状态机
        engine_id: 标记在已发布事件上的聚合ID
    """

    def __init__(self,
                 table: MultiplierTable,
                 economy: Economy,
                 presentation: Optional[PresentationGateway] = None,
                 config: Optional[EngineConfig] = None,
                 selector: Optional[MultiplierSource] = None,
                 rng: Optional[random.Random] = None,
                 event_bus: Optional[EventBus] = None,
                 state_machine: Optional[RoundStateMachine] = None,
                 engine_id: Optional[str] = None):
        self._config = config or EngineConfig()
        self._table = table
        self._economy = economy
        self._presentation = presentation or ImmediatePresentation()
        self._rng = rng or random.Random()
        self._selector = selector or WeightedSelector(table, self._rng)
        self._event_bus = event_bus or get_event_bus()
        self._state_machine = state_machine or StateMachineFactory.create_default_state_machine()
        self._engine_id = engine_id or f"engine_{uuid.uuid4().hex[:8]}"
        self._ctx = RoundContext(engine_id=self._engine_id)

        self._request_ids = itertools.count(1)
        self._round_ids = itertools.count(1)
        self._pending: Dict[int, _PendingRequest] = {}
        self._queue: Deque[Tuple[Callable[..., Any], Tuple[Any, ...]]] = deque()
        self._dispatching = False

        self._status_message = ""
        self._last_result: Optional[RoundResult] = None
        self._round_history: Deque[RoundResult] = deque(maxlen=1000)

        self.auto_play = AutoPlayController(self, rounds_target=self._config.auto_play_rounds_target)
        self.set_status(IDLE_STATUS)

    @classmethod
    def create(cls,
               config: Optional[EngineConfig] = None,
               persistence: Optional[PersistenceGateway] = None,
               presentation: Optional[PresentationGateway] = None,
               table: Optional[MultiplierTable] = None,
               rng: Optional[random.Random] = None,
               event_bus: Optional[EventBus] = None) -> 'RoundEngine':
        """
        根据配置构建引擎

        倍率表来自 ``config.table_path`` 或随包默认表；
        下注额与余额尽可能从 ``persistence`` 恢复。

        Raises:
            ConfigurationError: 倍率表不可用
        """
        config = config or EngineConfig()
        if table is None:
            table = load_table_from_file(config.table_path) if config.table_path else load_default_table()
        economy = Economy.restore(
            persistence,
            default_bet=config.default_bet,
            default_balance=config.default_balance,
            min_bet=config.min_bet,
            max_bet=config.max_bet,
        )
        return cls(table, economy, presentation=presentation, config=config, rng=rng, event_bus=event_bus)

    # ------------------------------------------------------------------
    # 只读状态
    # ------------------------------------------------------------------

    @property
    def engine_id(self) -> str:
        return self._engine_id

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def table(self) -> MultiplierTable:
        return self._table

    @property
    def economy(self) -> Economy:
        return self._economy

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def context(self) -> RoundContext:
        return self._ctx

    @property
    def phase(self) -> RoundPhase:
        return self._state_machine.current_phase

    @property
    def speed(self) -> SpeedMode:
        return self._ctx.speed

    @property
    def current_round(self) -> Optional[Round]:
        return self._ctx.current_round

    @property
    def status_message(self) -> str:
        return self._status_message

    @property
    def last_result(self) -> Optional[RoundResult]:
        return self._last_result

    @property
    def round_history(self) -> List[RoundResult]:
        return list(self._round_history)

    @property
    def bet_controls_enabled(self) -> bool:
        return self._ctx.bet_controls_enabled

    @property
    def pending_request_count(self) -> int:
        return len(self._pending)

    def snapshot(self) -> EngineSnapshot:
        current_round = self._ctx.current_round
        session = self.auto_play.session
        return EngineSnapshot(
            phase=self.phase.value,
            bet=self._economy.bet,
            balance=self._economy.balance,
            min_bet=self._economy.min_bet,
            max_bet=self._economy.max_bet,
            speed=self._ctx.speed.value,
            auto_play_active=self.auto_play.is_active,
            auto_play_rounds_remaining=session.rounds_remaining if session else 0,
            auto_play_stop_requested=self.auto_play.stop_requested,
            bet_controls_enabled=self.bet_controls_enabled,
            can_start_round=self._economy.can_start_round(),
            round_id=current_round.round_id if current_round else None,
            revealed_slots=list(current_round.reveal_order) if current_round else [],
            revealed_values=list(current_round.revealed_values) if current_round else [],
            status_message=self._status_message,
            rounds_completed=self._ctx.rounds_completed,
            last_result=self._last_result,
        )

    # ------------------------------------------------------------------
    # 输入意图
    # ------------------------------------------------------------------

    def on_adjust_bet_intent(self, delta: MoneyLike) -> CommandResult:
        """按 ``delta`` 调整下注额；仅在空闲且非自动游戏时有效"""
        return self._dispatch(self._handle_adjust_bet, delta)

    def on_start_round_intent(self) -> CommandResult:
        """开始一个手动回合"""
        return self._dispatch(self._handle_start_round)

    def on_reveal_intent(self, slot: int) -> CommandResult:
        """在手动回合中翻开位置 ``slot``（0 到 2）的卡牌"""
        return self._dispatch(self._handle_reveal, slot)

    def on_toggle_auto_play_intent(self) -> CommandResult:
        """开始自动游戏，或请求正在运行的会话停止"""
        return self._dispatch(self._handle_toggle_auto_play)

    def on_toggle_speed_intent(self) -> CommandResult:
        """在普通与快速动画之间切换；自动游戏期间被忽略"""
        return self._dispatch(self._handle_toggle_speed)

    # ------------------------------------------------------------------
    # 调度器
    # ------------------------------------------------------------------

    def _dispatch(self, handler: Callable[..., CommandResult], *args: Any) -> CommandResult:
        if self._dispatching:
            self._queue.append((handler, args))
            return CommandResult.deferred_result()

        self._dispatching = True
        try:
            result = handler(*args)
            while self._queue:
                queued_handler, queued_args = self._queue.popleft()
                queued_handler(*queued_args)
            return result
        except Exception:
            self._queue.clear()
            raise
        finally:
            self._dispatching = False

    def _completion(self, request_id: int) -> Callable[[], None]:
        def on_complete() -> None:
            self._dispatch(self._handle_completion, request_id)
        return on_complete

    def _new_request(self, kind: _RequestKind, round_id: str,
                     slot: Optional[int] = None, is_final: bool = False) -> int:
        request_id = next(self._request_ids)
        self._pending[request_id] = _PendingRequest(kind, round_id, slot, is_final)
        return request_id

    # ------------------------------------------------------------------
    # 意图处理
    # ------------------------------------------------------------------

    def _handle_adjust_bet(self, delta: MoneyLike) -> CommandResult:
        try:
            delta = to_money(delta)
        except (TypeError, ValueError, ArithmeticError):
            return self._reject(IntentType.ADJUST_BET, f"invalid bet delta {delta!r}", "INVALID_DELTA")
        if not delta.is_finite():
            return self._reject(IntentType.ADJUST_BET, f"invalid bet delta {delta}", "INVALID_DELTA")

        event = self._state_machine.handle_intent(self._ctx, IntentType.ADJUST_BET, {'delta': str(delta)})
        if event.is_rejection:
            return self._reject(IntentType.ADJUST_BET, event.reason)

        new_bet = self._economy.bet + delta
        if not self._economy.is_valid_bet(new_bet):
            return self._reject(
                IntentType.ADJUST_BET,
                f"bet {format_money(new_bet)} outside [{format_money(self._economy.min_bet)}, "
                f"{format_money(self._economy.max_bet)}]",
                "BET_OUT_OF_RANGE")
        if new_bet > self._economy.balance:
            return self._reject(IntentType.ADJUST_BET,
                                f"bet {format_money(new_bet)} exceeds balance", "BET_EXCEEDS_BALANCE")

        if not self._economy.adjust_bet(delta):
            return self._reject(IntentType.ADJUST_BET, "bet change refused", "BET_REFUSED")

        self.publish(EventType.BET_CHANGED, {
            'bet': str(self._economy.bet),
            'balance': str(self._economy.balance),
        })
        return CommandResult.success_result("bet changed", {'bet': self._economy.bet})

    def _handle_start_round(self) -> CommandResult:
        event = self._state_machine.handle_intent(self._ctx, IntentType.START_ROUND)
        if event.is_rejection:
            return self._reject(IntentType.START_ROUND, event.reason)

        if not self._economy.can_start_round():
            self.set_status("Insufficient balance")
            logger.info(f"[Round] start refused: bet {self._economy.bet} > balance {self._economy.balance}")
            return CommandResult.business_rule_violation("Insufficient balance", "INSUFFICIENT_BALANCE")

        self.begin_round()
        return CommandResult.success_result("round started", {'round_id': self._ctx.current_round.round_id})

    def _handle_reveal(self, slot: int) -> CommandResult:
        event = self._state_machine.handle_intent(self._ctx, IntentType.REVEAL, {'slot': slot})
        if event.is_rejection:
            return self._reject(IntentType.REVEAL, event.reason)

        value = self.reveal_slot(slot)
        return CommandResult.success_result("card revealed", {'slot': slot, 'value': value})

    def _handle_toggle_auto_play(self) -> CommandResult:
        event = self._state_machine.handle_intent(self._ctx, IntentType.TOGGLE_AUTO_PLAY)
        if event.is_rejection:
            return self._reject(IntentType.TOGGLE_AUTO_PLAY, event.reason)
        return self.auto_play.toggle()

    def _handle_toggle_speed(self) -> CommandResult:
        event = self._state_machine.handle_intent(self._ctx, IntentType.TOGGLE_SPEED)
        if event.is_rejection:
            return self._reject(IntentType.TOGGLE_SPEED, event.reason)
        self.set_speed(self._ctx.speed.toggled())
        return CommandResult.success_result("speed changed", {'speed': self._ctx.speed.value})

    def _reject(self, intent: IntentType, reason: str, error_code: str = "INTENT_REJECTED") -> CommandResult:
        logger.debug(f"[Round] {intent.value} ignored in {self.phase.name}: {reason}")
        current_round = self._ctx.current_round
        self._event_bus.publish(IntentRejectedEvent.create(
            self._engine_id, intent.value, self.phase.name, reason,
            current_round.round_id if current_round else None))
        return CommandResult.validation_error(reason, error_code)

    # ------------------------------------------------------------------
    # 表现层完成回调
    # ------------------------------------------------------------------

    def _handle_completion(self, request_id: int) -> CommandResult:
        pending = self._pending.pop(request_id, None)
        if pending is None:
            logger.warning(f"[Round] ignoring unknown or repeated completion #{request_id}")
            return CommandResult.validation_error("stale completion", "STALE_COMPLETION")

        current_round = self._ctx.current_round
        current_round_id = current_round.round_id if current_round else None
        if pending.round_id != current_round_id:
            logger.warning(f"[Round] ignoring {pending.kind.value} completion #{request_id} "
                           f"for finished round {pending.round_id}")
            return CommandResult.validation_error("stale completion", "STALE_COMPLETION")

        if pending.kind is _RequestKind.ENTRANCE:
            self._on_entrance_complete()
        elif pending.kind is _RequestKind.FLIP:
            self._on_flip_complete(pending)
        else:
            self._on_result_display_complete()
        return CommandResult.success_result(f"{pending.kind.value} complete")

    def _on_entrance_complete(self) -> None:
        self._transition(RoundPhase.REVEAL, "ENTRANCE_COMPLETE")
        if self._ctx.auto_play_active:
            self.set_status("Auto-play: revealing cards")
            self.auto_play.on_reveal_phase_entered()
        else:
            self.set_status("Tap any card to reveal")

    def _on_flip_complete(self, pending: _PendingRequest) -> None:
        if pending.is_final:
            self._settle()
        elif self._ctx.auto_play_active:
            self.auto_play.on_flip_complete()

    def _on_result_display_complete(self) -> None:
        decision = self.auto_play.on_round_complete()
        if decision is AutoPlayDecision.CONTINUE:
            return

        self._transition(RoundPhase.IDLE, "RESULT_DISPLAY_COMPLETE")
        if decision is AutoPlayDecision.INACTIVE:
            self.set_status(IDLE_STATUS)

    # ------------------------------------------------------------------
    # 回合流程（也由 AutoPlayController 驱动）
    # ------------------------------------------------------------------

    def begin_round(self) -> None:
        """
        提交押注、发三张牌并请求入场动画

        调用方需先检查可负担性。

        Raises:
            InsufficientBalanceError: 下注额不可负担
            PhaseTransitionError: 当前阶段无法开始回合
        """
        if not self._state_machine.can_transition_to(RoundPhase.ROUND_START, self._ctx):
            raise PhaseTransitionError(f"cannot start a round from {self.phase.name}")

        round_id = f"round_{next(self._round_ids)}"
        stake = self._economy.commit_stake(round_id)
        values = [self._selector.draw() for _ in range(SLOT_COUNT)]
        self._rng.shuffle(values)

        self._pending.clear()
        self._ctx.current_round = Round(round_id=round_id, bet=stake, assigned_multipliers=tuple(values))
        self._transition(RoundPhase.ROUND_START, "ROUND_STARTED")

        logger.info(f"[Round] {round_id} started: bet={format_money(stake)} "
                    f"balance={format_money(self._economy.balance)}")
        self._event_bus.publish(RoundStartedEvent.create(
            self._engine_id, round_id, stake, self._economy.balance, self._ctx.auto_play_active))
        self.publish(EventType.BALANCE_CHANGED, {'balance': str(self._economy.balance)}, round_id)
        self.set_status("Auto-play: dealing…" if self._ctx.auto_play_active else "Preparing cards…")

        request_id = self._new_request(_RequestKind.ENTRANCE, round_id)
        self._presentation.request_entrance_animation(
            EntranceRequest(
                request_id=request_id,
                round_id=round_id,
                speed=self._ctx.speed,
                duration=self._config.entrance_seconds(self._ctx.speed),
            ),
            self._completion(request_id),
        )

    def reveal_slot(self, slot: int) -> Decimal:
        """
        翻开 ``slot`` 并请求翻牌动画

        Raises:
            InvalidStateError: 位置越界或已翻开
        """
        current_round = self._ctx.current_round
        value = current_round.reveal(slot)
        is_final = current_round.is_complete
        rarity = get_rarity(value).value

        logger.debug(f"[Round] {current_round.round_id} slot {slot} -> x{value}")
        self._event_bus.publish(CardRevealedEvent.create(
            self._engine_id, current_round.round_id, slot, value, rarity, len(current_round.reveal_order)))

        request_id = self._new_request(_RequestKind.FLIP, current_round.round_id, slot, is_final)
        self._presentation.request_flip_animation(
            FlipRequest(
                request_id=request_id,
                round_id=current_round.round_id,
                slot=slot,
                value=value,
                rarity=rarity,
                speed=self._ctx.speed,
                duration=self._config.flip_seconds(self._ctx.speed),
            ),
            self._completion(request_id),
        )
        return value

    def _settle(self) -> None:
        current_round = self._ctx.current_round
        settlement = settle(current_round.revealed_values, current_round.bet)
        self._economy.apply_payout(settlement.payout, current_round.round_id)
        self._transition(RoundPhase.RESULT, "ALL_CARDS_REVEALED")

        result = RoundResult(
            round_id=current_round.round_id,
            bet=settlement.bet,
            multipliers=list(settlement.revealed_values),
            product=settlement.product,
            payout=settlement.payout,
            balance_after=self._economy.balance,
            auto_play=self._ctx.auto_play_active,
        )
        self._last_result = result
        self._round_history.append(result)

        logger.info(f"[Round] {result.round_id} settled: product={result.product} "
                    f"payout={format_money(result.payout)} balance={format_money(result.balance_after)}")
        self._event_bus.publish(RoundSettledEvent.create(
            self._engine_id, result.round_id, result.bet, result.multipliers,
            result.product, result.payout, result.balance_after))
        self.publish(EventType.BALANCE_CHANGED, {'balance': str(result.balance_after)}, result.round_id)
        self.set_status("Result!")

        request_id = self._new_request(_RequestKind.RESULT, result.round_id)
        self._presentation.request_result_display(
            ResultDisplayRequest(request_id=request_id, result=result,
                                 duration=self._config.result_display_seconds),
            self._completion(request_id),
        )
        if result.is_win:
            self._presentation.request_win_highlight(result.product, result.payout)

    def _transition(self, target: RoundPhase, trigger: str) -> None:
        source = self._state_machine.current_phase
        current_round = self._ctx.current_round
        round_id = current_round.round_id if current_round else None
        self._state_machine.transition_to(
            target, self._ctx, PhaseEvent(trigger, {'round_id': round_id}, source))
        self._event_bus.publish(PhaseChangedEvent.create(
            self._engine_id, source.value, target.value, round_id))

    # ------------------------------------------------------------------
    # 公共辅助方法
    # ------------------------------------------------------------------

    def set_speed(self, speed: SpeedMode) -> None:
        if speed is self._ctx.speed:
            return
        self._ctx.speed = speed
        self.publish(EventType.SPEED_CHANGED, {'speed': speed.value})

    def set_status(self, message: str) -> None:
        self._status_message = message
        self._event_bus.publish(StatusMessageEvent.create(self._engine_id, message))

    def publish(self, event_type: EventType, data: Dict[str, Any],
                round_id: Optional[str] = None) -> DomainEvent:
        event = DomainEvent.create(event_type, self._engine_id, data, round_id)
        self._event_bus.publish(event)
        return event
