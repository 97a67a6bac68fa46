"""
金额工具

金额始终以精确的 Decimal 保存，只有显示时才舍入到分。
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

__all__ = ['CENT', 'to_money', 'quantize_cents', 'format_money']

CENT = Decimal("0.01")

MoneyLike = Union[int, float, str, Decimal]


def to_money(value: MoneyLike) -> Decimal:
    """将数值转换为 Decimal，避免二进制浮点误差"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a money amount")
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize_cents(value: MoneyLike) -> Decimal:
    return to_money(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: MoneyLike) -> str:
    """两位小数的显示字符串，例如 ``format_money(20) == "20.00"``"""
    return f"{quantize_cents(value):.2f}"
