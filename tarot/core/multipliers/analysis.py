"""
赔付表分析

通过枚举所有有序三元抽取，精确计算倍率表的返还率。每回合派彩为
下注额 x 正倍率之积，全部为死牌时不派彩。
"""

import itertools
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List

from ..rules.payout import compute_product
from .types import MultiplierTable

__all__ = ['TableAnalysis', 'analyze_table', 'describe_outcomes']


@dataclass(frozen=True)
class TableAnalysis:
    """
    倍率表的理论回合统计

    Attributes:
        expected_return: 每单位下注的期望派彩（以小数表示的 RTP）
        house_edge: 1 - expected_return
        hit_frequency: 回合有任何派彩的概率
        profit_frequency: 回合派彩超过押注的概率
        all_dead_probability: 三张全为死牌的概率
        max_multiplier: 可达到的最大回合倍率
        max_multiplier_probability: 命中 max_multiplier 的概率
        standard_deviation: 回合倍率的标准差
        outcomes: 回合倍率 -> 概率
    """
    expected_return: float
    house_edge: float
    hit_frequency: float
    profit_frequency: float
    all_dead_probability: float
    max_multiplier: Decimal
    max_multiplier_probability: float
    standard_deviation: float
    outcomes: Dict[Decimal, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {
            'expected_return': round(self.expected_return, 8),
            'expected_return_pct': round(self.expected_return * 100, 4),
            'house_edge_pct': round(self.house_edge * 100, 4),
            'hit_frequency_pct': round(self.hit_frequency * 100, 4),
            'profit_frequency_pct': round(self.profit_frequency * 100, 4),
            'all_dead_probability': self.all_dead_probability,
            'max_multiplier': str(self.max_multiplier),
            'max_multiplier_probability': self.max_multiplier_probability,
            'standard_deviation': round(self.standard_deviation, 6),
            'distinct_outcomes': len(self.outcomes),
        }


def analyze_table(table: MultiplierTable, cards: int = 3) -> TableAnalysis:
    """
    枚举所有有序抽取并汇总回合结果

    Args:
        table: 待分析的倍率表
        cards: 每回合卡牌数

    Returns:
        TableAnalysis: 倍率表的精确统计
    """
    weighted = [(entry.value, table.probability_of(entry)) for entry in table if entry.chance > 0]

    outcomes: Dict[Decimal, float] = {}
    for combo in itertools.product(weighted, repeat=cards):
        probability = math.prod(p for _, p in combo)
        multiplier = compute_product([v for v, _ in combo])
        outcomes[multiplier] = outcomes.get(multiplier, 0.0) + probability

    expected = sum(float(m) * p for m, p in outcomes.items())
    second_moment = sum(float(m) ** 2 * p for m, p in outcomes.items())
    variance = max(0.0, second_moment - expected * expected)

    dead_probability = sum(p for v, p in weighted if v == 0) ** cards
    max_multiplier = max(outcomes)

    return TableAnalysis(
        expected_return=expected,
        house_edge=1.0 - expected,
        hit_frequency=sum(p for m, p in outcomes.items() if m > 0),
        profit_frequency=sum(p for m, p in outcomes.items() if m > 1),
        all_dead_probability=dead_probability,
        max_multiplier=max_multiplier,
        max_multiplier_probability=outcomes[max_multiplier],
        standard_deviation=math.sqrt(variance),
        outcomes=dict(sorted(outcomes.items())),
    )


def describe_outcomes(analysis: TableAnalysis, limit: int = 10) -> List[str]:
    """最可能出现的回合倍率的可读描述"""
    ranked = sorted(analysis.outcomes.items(), key=lambda item: item[1], reverse=True)[:limit]
    return [f"x{m.normalize():f}: {p * 100:.4f}%" for m, p in ranked]
