"""
状态机类型

阶段、意图、单回合记录以及阶段处理器共享的上下文。
"""

from enum import Enum
from decimal import Decimal
from typing import Protocol, Dict, List, Optional, Any, Tuple
from dataclasses import dataclass, field

from ..exceptions import InvalidStateError

__all__ = [
    'SLOT_COUNT',
    'RoundPhase',
    'SpeedMode',
    'IntentType',
    'PhaseEvent',
    'Round',
    'RoundContext',
    'PhaseHandler'
]

SLOT_COUNT = 3


class RoundPhase(Enum):
    """回合阶段"""
    IDLE = "idle"
    ROUND_START = "round_start"
    REVEAL = "reveal"
    RESULT = "result"


class SpeedMode(Enum):
    """交给表现层的动画速度"""
    NORMAL = "normal"
    FAST = "fast"

    def toggled(self) -> 'SpeedMode':
        return SpeedMode.FAST if self is SpeedMode.NORMAL else SpeedMode.NORMAL


class IntentType(Enum):
    """输入的用户意图"""
    ADJUST_BET = "adjust_bet"
    START_ROUND = "start_round"
    REVEAL = "reveal"
    TOGGLE_AUTO_PLAY = "toggle_auto_play"
    TOGGLE_SPEED = "toggle_speed"


@dataclass(frozen=True)
class PhaseEvent:
    """将意图或触发交给阶段处理器后的结果"""
    event_type: str
    data: Dict[str, Any]
    source_phase: RoundPhase

    @property
    def is_rejection(self) -> bool:
        return self.event_type == "INVALID_INTENT"

    @property
    def reason(self) -> str:
        return self.data.get('reason', '')


@dataclass
class Round:
    """
    一次从下注到结算的循环

    ``assigned_multipliers`` 将位置映射到数值，回合开始时即固定。
    ``reveal_order`` 与 ``revealed_values`` 同步增长，每次接受翻牌各增加一项。
    """
    round_id: str
    bet: Decimal
    assigned_multipliers: Tuple[Decimal, ...]
    reveal_order: List[int] = field(default_factory=list)
    revealed_values: List[Decimal] = field(default_factory=list)

    def __post_init__(self):
        if not self.round_id:
            raise ValueError("round_id cannot be empty")
        if len(self.assigned_multipliers) != SLOT_COUNT:
            raise ValueError(f"a round needs exactly {SLOT_COUNT} multipliers, got {len(self.assigned_multipliers)}")
        if self.bet <= 0:
            raise ValueError(f"bet must be positive: {self.bet}")

    def is_valid_slot(self, slot: int) -> bool:
        return isinstance(slot, int) and not isinstance(slot, bool) and 0 <= slot < SLOT_COUNT

    def is_revealed(self, slot: int) -> bool:
        return slot in self.reveal_order

    @property
    def is_complete(self) -> bool:
        return len(self.reveal_order) == SLOT_COUNT

    def unrevealed_slots(self) -> List[int]:
        return [slot for slot in range(SLOT_COUNT) if slot not in self.reveal_order]

    def next_unrevealed_slot(self) -> Optional[int]:
        remaining = self.unrevealed_slots()
        return remaining[0] if remaining else None

    def reveal(self, slot: int) -> Decimal:
        """
        翻开一个位置

        Args:
            slot: 位置索引，0 到 2

        Returns:
            Decimal: 该位置的倍率

        Raises:
            InvalidStateError: 位置越界或已翻开
        """
        if not self.is_valid_slot(slot):
            raise InvalidStateError(f"slot {slot!r} out of range")
        if self.is_revealed(slot):
            raise InvalidStateError(f"slot {slot} already revealed")
        value = self.assigned_multipliers[slot]
        self.reveal_order.append(slot)
        self.revealed_values.append(value)
        return value


@dataclass
class RoundContext:
    """阶段处理器共享的可变状态"""
    engine_id: str
    current_phase: RoundPhase = RoundPhase.IDLE
    current_round: Optional[Round] = None
    auto_play_active: bool = False
    speed: SpeedMode = SpeedMode.NORMAL
    rounds_completed: int = 0
    last_event: Optional[PhaseEvent] = None

    def __post_init__(self):
        if not self.engine_id:
            raise ValueError("engine_id cannot be empty")

    @property
    def bet_controls_enabled(self) -> bool:
        return self.current_phase is RoundPhase.IDLE and not self.auto_play_active


class PhaseHandler(Protocol):
    """阶段处理器协议"""

    def on_enter(self, ctx: RoundContext) -> None:
        ...

    def handle_intent(self, ctx: RoundContext, intent: IntentType, data: Dict[str, Any]) -> PhaseEvent:
        ...

    def on_exit(self, ctx: RoundContext) -> None:
        ...

    def can_transition_to(self, target_phase: RoundPhase, ctx: RoundContext) -> bool:
        ...
