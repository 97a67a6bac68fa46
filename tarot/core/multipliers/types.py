"""
倍率表类型

定义不可变的卡牌数值目录及其相对权重。
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable, Iterator, Tuple, Union

from ..exceptions import ConfigurationError

__all__ = [
    'Rarity',
    'RARE_THRESHOLD',
    'get_rarity',
    'MultiplierEntry',
    'MultiplierTable',
]

Number = Union[int, float, str, Decimal]

# 达到此值及以上按"稀有"（金色）样式显示
RARE_THRESHOLD = Decimal("3")


class Rarity(Enum):
    """倍率值的视觉分组"""
    DEAD = "dead"
    COMMON = "common"
    RARE = "rare"


def get_rarity(value: Decimal) -> Rarity:
    """对倍率值分类

    Args:
        value: 倍率值

    Returns:
        0 为 DEAD，>= 3 为 RARE，其余为 COMMON
    """
    if value == 0:
        return Rarity.DEAD
    if value >= RARE_THRESHOLD:
        return Rarity.RARE
    return Rarity.COMMON


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


@dataclass(frozen=True)
class MultiplierEntry:
    """
    一个可能的卡牌数值

    Attributes:
        value: 作用于下注额的倍率；0 为"死牌"
        chance: 相对权重，权重之和无需为固定值
    """
    value: Decimal
    chance: float

    def __post_init__(self):
        object.__setattr__(self, 'value', _to_decimal(self.value))
        object.__setattr__(self, 'chance', float(self.chance))
        if not self.value.is_finite() or self.value < 0:
            raise ValueError(f"multiplier value must be a finite number >= 0, got {self.value}")
        if not math.isfinite(self.chance) or self.chance < 0:
            raise ValueError(f"chance must be a finite number >= 0, got {self.chance}")

    @property
    def rarity(self) -> Rarity:
        return get_rarity(self.value)

    @property
    def is_dead(self) -> bool:
        return self.value == 0


class MultiplierTable:
    """
    有序、只读的倍率条目序列

    插入顺序有意义：加权选择器按此顺序累加权重，出现舍入误差时回退到最后一项。

    Raises:
        ConfigurationError: 表为空或总权重为0
    """

    def __init__(self, entries: Iterable[MultiplierEntry]):
        self._entries: Tuple[MultiplierEntry, ...] = tuple(entries)
        if not self._entries:
            raise ConfigurationError("multiplier table must contain at least one entry")
        self._total_weight = sum(entry.chance for entry in self._entries)
        if self._total_weight <= 0:
            raise ConfigurationError("multiplier table weights must sum to a positive total")

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[Number, Number]]) -> 'MultiplierTable':
        """由 (value, chance) 对构建倍率表"""
        return cls(MultiplierEntry(value=value, chance=chance) for value, chance in pairs)

    @property
    def entries(self) -> Tuple[MultiplierEntry, ...]:
        return self._entries

    @property
    def total_weight(self) -> float:
        return self._total_weight

    @property
    def last(self) -> MultiplierEntry:
        return self._entries[-1]

    @property
    def values(self) -> Tuple[Decimal, ...]:
        """按表顺序去重后的数值"""
        seen = []
        for entry in self._entries:
            if entry.value not in seen:
                seen.append(entry.value)
        return tuple(seen)

    def probability_of(self, entry: MultiplierEntry) -> float:
        """单次抽取落在该条目上的概率"""
        return entry.chance / self._total_weight

    def to_pairs(self) -> Tuple[Tuple[Decimal, float], ...]:
        return tuple((entry.value, entry.chance) for entry in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[MultiplierEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> MultiplierEntry:
        return self._entries[index]

    def __repr__(self) -> str:
        return f"MultiplierTable({len(self._entries)} entries, total_weight={self._total_weight})"
