"""
加权倍率选择器

按权重比例从 MultiplierTable 中抽取卡牌数值。
"""

import random
from decimal import Decimal
from typing import List, Optional, Protocol

from .types import MultiplierTable

__all__ = ['MultiplierSource', 'WeightedSelector']


class MultiplierSource(Protocol):
    """每次调用产生一个倍率值的来源"""

    def draw(self) -> Decimal:
        ...


class WeightedSelector:
    """
    倍率表上的加权随机选择

    可注入随机数生成器，便于测试得到确定结果。
    除推进随机数生成器外没有其他副作用。

    Examples:
        >>> table = MultiplierTable.from_pairs([(0, 40), (1, 30), (2, 20), (5, 10)])
        >>> selector = WeightedSelector(table, rng=random.Random(7))
        >>> selector.draw() in table.values
        True
    """

    def __init__(self, table: MultiplierTable, rng: Optional[random.Random] = None) -> None:
        self._table = table
        self._rng = rng or random.Random()

    @property
    def table(self) -> MultiplierTable:
        return self._table

    def draw(self) -> Decimal:
        """
        抽取一个倍率值

        在 [0, 总权重) 内均匀取一个随机数，按表顺序累加权重，
        第一个累计权重达到该随机数的条目胜出。权重为0的条目被跳过。

        Returns:
            Decimal: 抽中的值。若浮点累加始终达不到随机数，则回退到表的最后一项。
        """
        roll = self._rng.random() * self._table.total_weight

        accumulated = 0.0
        for entry in self._table:
            if entry.chance <= 0:
                continue
            accumulated += entry.chance
            if accumulated >= roll:
                return entry.value

        return self._table.last.value

    def draw_many(self, count: int) -> List[Decimal]:
        """
        抽取多个相互独立的值

        Raises:
            ValueError: count 为负数
        """
        if count < 0:
            raise ValueError("count must be non-negative")
        return [self.draw() for _ in range(count)]
