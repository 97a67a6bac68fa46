"""
规则模块

回合引擎与赔付表分析共用的结算计算。
"""

from .payout import Settlement, compute_product, settle

__all__ = [
    'Settlement',
    'compute_product',
    'settle',
]
