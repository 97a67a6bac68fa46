"""
持久化类型

持久化记录只有 {bet, balance}；会话的其余状态在启动时重建。
"""

from decimal import Decimal
from typing import Any, Dict, Optional, Protocol

from pydantic import Field, ValidationError
from pydantic.dataclasses import dataclass as pydantic_dataclass

__all__ = ['PersistedState', 'PersistenceGateway', 'parse_persisted_state']


@pydantic_dataclass(frozen=True)
class PersistedState:
    """保存的下注额与余额"""
    bet: Decimal = Field(..., gt=0, allow_inf_nan=False, description="每回合下注额")
    balance: Decimal = Field(..., ge=0, allow_inf_nan=False, description="玩家余额")

    def to_dict(self) -> Dict[str, str]:
        return {'bet': str(self.bet), 'balance': str(self.balance)}


def parse_persisted_state(raw: Any) -> Optional[PersistedState]:
    """
    校验已解码的记录

    Args:
        raw: 从存储中读取的任意数据

    Returns:
        PersistedState，记录缺失或格式错误时为 None
    """
    if not isinstance(raw, dict):
        return None
    bet, balance = raw.get('bet'), raw.get('balance')
    if isinstance(bet, bool) or isinstance(balance, bool):
        return None
    if isinstance(bet, float):
        bet = str(bet)
    if isinstance(balance, float):
        balance = str(balance)
    try:
        return PersistedState(bet=bet, balance=balance)
    except (ValidationError, TypeError):
        return None


class PersistenceGateway(Protocol):
    """
    经济系统的尽力键值存储

    实现可能丢失数据。记录缺失或格式错误时 ``load`` 返回 None，
    调用方回退到默认值。
    """

    def load(self) -> Optional[PersistedState]:
        ...

    def save(self, state: PersistedState) -> None:
        ...
