"""
表现层网关

引擎向表现层请求动画和结果显示，只通过随请求传入的完成回调得知其结束。
每个回调必须恰好调用一次；多余或迟到的调用会被引擎忽略。
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional, Protocol, Tuple

from ..core.state_machine.types import SpeedMode
from .dto import RoundResult

__all__ = [
    'Completion',
    'EntranceRequest',
    'FlipRequest',
    'ResultDisplayRequest',
    'PresentationGateway',
    'ImmediatePresentation',
]

Completion = Callable[[], None]


@dataclass(frozen=True)
class EntranceRequest:
    """将三张背面朝上的卡牌洗到牌桌上"""
    request_id: int
    round_id: str
    speed: SpeedMode
    duration: float


@dataclass(frozen=True)
class FlipRequest:
    """翻开一张卡牌"""
    request_id: int
    round_id: str
    slot: int
    value: Decimal
    rarity: str
    speed: SpeedMode
    duration: float


@dataclass(frozen=True)
class ResultDisplayRequest:
    """显示结算结果 ``duration`` 秒"""
    request_id: int
    result: RoundResult
    duration: float


class PresentationGateway(Protocol):
    """引擎对前端的要求"""

    def request_entrance_animation(self, request: EntranceRequest, on_complete: Completion) -> None:
        ...

    def request_flip_animation(self, request: FlipRequest, on_complete: Completion) -> None:
        ...

    def request_result_display(self, request: ResultDisplayRequest, on_complete: Completion) -> None:
        ...

    def request_win_highlight(self, product: Decimal, payout: Decimal) -> None:
        ...


class ImmediatePresentation:
    """
    立即完成每个请求

    用于无界面模拟。请求会被记录，调用方可以查看本应显示的内容。
    """

    def __init__(self, keep_history: bool = True):
        self._keep_history = keep_history
        self.entrances: List[EntranceRequest] = []
        self.flips: List[FlipRequest] = []
        self.results: List[ResultDisplayRequest] = []
        self.win_highlights: List[Tuple[Decimal, Decimal]] = []

    def request_entrance_animation(self, request: EntranceRequest, on_complete: Completion) -> None:
        if self._keep_history:
            self.entrances.append(request)
        on_complete()

    def request_flip_animation(self, request: FlipRequest, on_complete: Completion) -> None:
        if self._keep_history:
            self.flips.append(request)
        on_complete()

    def request_result_display(self, request: ResultDisplayRequest, on_complete: Completion) -> None:
        if self._keep_history:
            self.results.append(request)
        on_complete()

    def request_win_highlight(self, product: Decimal, payout: Decimal) -> None:
        if self._keep_history:
            self.win_highlights.append((product, payout))

    @property
    def last_result(self) -> Optional[RoundResult]:
        return self.results[-1].result if self.results else None
