"""
经济模块

下注额/余额管理、交易账本与金额格式化。
"""

from .money import CENT, to_money, quantize_cents, format_money
from .transaction import TransactionType, EconomyTransaction
from .economy import (
    Economy,
    EconomySnapshot,
    DEFAULT_MIN_BET,
    DEFAULT_MAX_BET,
    DEFAULT_BET,
    DEFAULT_BALANCE,
)

__all__ = [
    'CENT',
    'to_money',
    'quantize_cents',
    'format_money',
    'TransactionType',
    'EconomyTransaction',
    'Economy',
    'EconomySnapshot',
    'DEFAULT_MIN_BET',
    'DEFAULT_MAX_BET',
    'DEFAULT_BET',
    'DEFAULT_BALANCE',
]
