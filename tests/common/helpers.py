"""
测试共用辅助工具

可控的表现层网关与选择器，测试可以精确决定动画何时结束以及发出哪些倍率。
"""

import random
from collections import deque
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from tarot.application.config_service import EngineConfig
from tarot.application.presentation import (
    Completion,
    EntranceRequest,
    FlipRequest,
    ResultDisplayRequest,
)
from tarot.application.round_engine import RoundEngine
from tarot.core.economy.economy import Economy
from tarot.core.events import EventBus, EventType
from tarot.core.multipliers.types import MultiplierTable

EXAMPLE_TABLE_PAIRS = [(0, 40), (1, 30), (2, 20), (5, 10)]


def example_table() -> MultiplierTable:
    return MultiplierTable.from_pairs(EXAMPLE_TABLE_PAIRS)


class ScriptedSelector:
    """按固定序列发牌，用完后重复最后一个值"""

    def __init__(self, values: Iterable):
        self._values = deque(Decimal(str(v)) for v in values)
        self._last: Optional[Decimal] = None
        self.draw_count = 0

    def draw(self) -> Decimal:
        self.draw_count += 1
        if self._values:
            self._last = self._values.popleft()
        if self._last is None:
            raise AssertionError("ScriptedSelector has no values")
        return self._last

    def extend(self, values: Iterable) -> None:
        self._values.extend(Decimal(str(v)) for v in values)


class FixedOrderRandom(random.Random):
    """洗牌时保持抽取顺序不变的随机数生成器"""

    def shuffle(self, x, *args, **kwargs) -> None:
        return None


class DeferredPresentation:
    """记录请求；由测试决定每个请求何时完成"""

    def __init__(self):
        self.entrances: List[Tuple[EntranceRequest, Completion]] = []
        self.flips: List[Tuple[FlipRequest, Completion]] = []
        self.results: List[Tuple[ResultDisplayRequest, Completion]] = []
        self.win_highlights: List[Tuple[Decimal, Decimal]] = []

    def request_entrance_animation(self, request: EntranceRequest, on_complete: Completion) -> None:
        self.entrances.append((request, on_complete))

    def request_flip_animation(self, request: FlipRequest, on_complete: Completion) -> None:
        self.flips.append((request, on_complete))

    def request_result_display(self, request: ResultDisplayRequest, on_complete: Completion) -> None:
        self.results.append((request, on_complete))

    def request_win_highlight(self, product: Decimal, payout: Decimal) -> None:
        self.win_highlights.append((product, payout))

    def complete_entrance(self, index: int = -1) -> None:
        self.entrances[index][1]()

    def complete_flip(self, index: int = -1) -> None:
        self.flips[index][1]()

    def complete_result(self, index: int = -1) -> None:
        self.results[index][1]()

    @property
    def flip_slots(self) -> List[int]:
        return [request.slot for request, _ in self.flips]


def make_engine(values: Optional[Iterable] = None,
                bet="1",
                balance="100",
                presentation=None,
                table: Optional[MultiplierTable] = None,
                persistence=None,
                config: Optional[EngineConfig] = None,
                rng: Optional[random.Random] = None,
                event_bus: Optional[EventBus] = None) -> RoundEngine:
    """
    基于示例倍率表、使用独立事件总线的引擎

    传入 ``values`` 时按位置顺序由 ScriptedSelector 发牌。
    """
    config = config or EngineConfig()
    table = table or example_table()
    economy = Economy(bet, balance, config.min_bet, config.max_bet, persistence)
    selector = ScriptedSelector(values) if values is not None else None
    if rng is None:
        rng = FixedOrderRandom(0) if values is not None else random.Random(1234)
    return RoundEngine(
        table,
        economy,
        presentation=presentation,
        config=config,
        selector=selector,
        rng=rng,
        event_bus=event_bus or EventBus(),
    )


def play_manual_round(engine: RoundEngine, order=(0, 1, 2)) -> None:
    """开始一个回合并按 ``order`` 翻开位置；假定使用立即完成的表现层"""
    result = engine.on_start_round_intent()
    assert result.success, result.message
    for slot in order:
        engine.on_reveal_intent(slot)


def event_types(engine: RoundEngine) -> List[EventType]:
    return [event.event_type for event in engine.event_bus.get_event_history()]


def status_messages(engine: RoundEngine) -> List[str]:
    return [event.data['message']
            for event in engine.event_bus.get_event_history(event_type=EventType.STATUS_MESSAGE)]
