"""
倍率模块

带权重的卡牌数值目录、从中抽取的选择器，以及赔付表分析。
"""

from .types import Rarity, RARE_THRESHOLD, get_rarity, MultiplierEntry, MultiplierTable
from .selector import MultiplierSource, WeightedSelector
from .loader import (
    MultiplierEntryModel,
    parse_table,
    load_table_from_json,
    load_table_from_file,
    load_default_table,
)
from .analysis import TableAnalysis, analyze_table, describe_outcomes

__all__ = [
    'Rarity',
    'RARE_THRESHOLD',
    'get_rarity',
    'MultiplierEntry',
    'MultiplierTable',
    'MultiplierSource',
    'WeightedSelector',
    'MultiplierEntryModel',
    'parse_table',
    'load_table_from_json',
    'load_table_from_file',
    'load_default_table',
    'TableAnalysis',
    'analyze_table',
    'describe_outcomes',
]
