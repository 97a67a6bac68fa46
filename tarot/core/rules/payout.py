"""
结算计算

一回合的派彩为下注额乘以已翻开正倍率之积。死牌（0倍）会显示，
但不参与乘积；若全部为死牌，乘积定义为0。
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence, Tuple

__all__ = ['Settlement', 'compute_product', 'settle']


@dataclass(frozen=True)
class Settlement:
    """一个已结算回合的结果"""
    bet: Decimal
    revealed_values: Tuple[Decimal, ...]
    product: Decimal
    payout: Decimal

    @property
    def is_win(self) -> bool:
        return self.payout > 0

    @property
    def net_change(self) -> Decimal:
        """整个回合的余额变化（含押注）"""
        return self.payout - self.bet


def compute_product(values: Sequence[Decimal]) -> Decimal:
    """
    计算正倍率之积

    Args:
        values: 任意顺序的已翻开倍率

    Returns:
        Decimal: 所有 > 0 的值之积，没有则为0
    """
    positive = [v for v in values if v > 0]
    if not positive:
        return Decimal(0)
    return math.prod(positive, start=Decimal(1))


def settle(values: Sequence[Decimal], bet: Decimal) -> Settlement:
    """计算已全部翻开回合的乘积与派彩"""
    if bet < 0:
        raise ValueError(f"bet cannot be negative: {bet}")
    product = compute_product(values)
    return Settlement(
        bet=bet,
        revealed_values=tuple(values),
        product=product,
        payout=product * bet,
    )
