"""
倍率表加载

倍率表是静态 JSON 数据：由 {"value": ..., "chance": ...} 对象组成的列表。
启动时校验一次，任何问题都视为配置错误。
"""

import json
import logging
from decimal import Decimal
from importlib import resources
from pathlib import Path
from typing import Any, List, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..exceptions import ConfigurationError
from .types import MultiplierEntry, MultiplierTable

__all__ = [
    'MultiplierEntryModel',
    'parse_table',
    'load_table_from_json',
    'load_table_from_file',
    'load_default_table',
    'DEFAULT_TABLE_RESOURCE',
]

logger = logging.getLogger(__name__)

DEFAULT_TABLE_RESOURCE = "default_table.json"


class MultiplierEntryModel(BaseModel):
    """JSON 表中一行的结构"""
    model_config = ConfigDict(extra='forbid', frozen=True)

    value: Decimal = Field(..., ge=0, allow_inf_nan=False, description="倍率值")
    chance: float = Field(..., ge=0, allow_inf_nan=False, description="相对权重")

    @field_validator('value', mode='before')
    @classmethod
    def _float_as_written(cls, v):
        # 0.3 必须保持为 0.3，而不是最接近的二进制浮点数
        if isinstance(v, float):
            return Decimal(str(v))
        return v


def parse_table(raw: Any) -> MultiplierTable:
    """
    校验已解码的 JSON 数据并构建倍率表

    Args:
        raw: 已解码的 JSON，应为行对象列表

    Returns:
        MultiplierTable: 校验后的倍率表

    Raises:
        ConfigurationError: 数据不是由有效行组成的非空列表
    """
    if not isinstance(raw, list):
        raise ConfigurationError(f"multiplier table must be a JSON list, got {type(raw).__name__}")

    rows: List[MultiplierEntryModel] = []
    for index, item in enumerate(raw):
        try:
            rows.append(MultiplierEntryModel.model_validate(item))
        except ValidationError as e:
            raise ConfigurationError(f"invalid multiplier table row {index}: {e}") from e

    table = MultiplierTable(MultiplierEntry(value=row.value, chance=row.chance) for row in rows)
    logger.debug(f"[Multipliers] loaded table with {len(table)} entries, total weight {table.total_weight}")
    return table


def load_table_from_json(text: str) -> MultiplierTable:
    """从 JSON 字符串解析倍率表"""
    try:
        raw = json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"multiplier table is not valid JSON: {e}") from e
    return parse_table(raw)


def load_table_from_file(path: Union[str, Path]) -> MultiplierTable:
    """读取并解析倍率表文件"""
    try:
        text = Path(path).read_text(encoding='utf-8')
    except OSError as e:
        raise ConfigurationError(f"cannot read multiplier table {path}: {e}") from e
    return load_table_from_json(text)


def load_default_table() -> MultiplierTable:
    """加载随引擎打包的默认倍率表"""
    text = resources.files(__package__).joinpath("data").joinpath(DEFAULT_TABLE_RESOURCE).read_text(encoding='utf-8')
    return load_table_from_json(text)
