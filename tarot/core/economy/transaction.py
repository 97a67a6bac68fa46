"""
经济交易记录

定义每次下注额/余额变更时写入的账本条目类型。
"""

from enum import Enum, auto
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Dict, Any
import itertools
import time

__all__ = ['TransactionType', 'EconomyTransaction']

_sequence = itertools.count(1)


class TransactionType(Enum):
    """经济交易类型"""
    STAKE = auto()        # 回合开始时扣除下注额
    PAYOUT = auto()       # 结算时入账奖金
    BET_ADJUST = auto()   # 空闲时调整下注额


@dataclass(frozen=True)
class EconomyTransaction:
    """
    一条账本记录

    Attributes:
        transaction_id: 唯一ID，以交易类型为前缀
        transaction_type: 变更类型
        amount: STAKE/PAYOUT 为余额变化量，BET_ADJUST 为下注额变化量
        bet_after: 变更后的下注额
        balance_after: 变更后的余额
        timestamp: 变更发生的时间
        description: 描述
        metadata: 可选附加数据，例如回合ID
    """
    transaction_id: str
    transaction_type: TransactionType
    amount: Decimal
    bet_after: Decimal
    balance_after: Decimal
    timestamp: float
    description: str = ""
    metadata: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if not self.transaction_id:
            raise ValueError("transaction_id cannot be empty")
        if self.transaction_type is not TransactionType.BET_ADJUST and self.amount < 0:
            raise ValueError("stake and payout amounts cannot be negative")
        if self.balance_after < 0:
            raise ValueError("balance_after cannot be negative")
        if self.timestamp <= 0:
            raise ValueError("timestamp must be positive")

    @classmethod
    def _create(cls, transaction_type: TransactionType, amount: Decimal, bet_after: Decimal,
                balance_after: Decimal, description: str,
                metadata: Optional[Dict[str, Any]] = None) -> 'EconomyTransaction':
        return cls(
            transaction_id=f"{transaction_type.name.lower()}_{next(_sequence)}",
            transaction_type=transaction_type,
            amount=amount,
            bet_after=bet_after,
            balance_after=balance_after,
            timestamp=time.time(),
            description=description,
            metadata=metadata,
        )

    @classmethod
    def create_stake(cls, amount: Decimal, bet_after: Decimal, balance_after: Decimal,
                     description: str = "", metadata: Optional[Dict[str, Any]] = None) -> 'EconomyTransaction':
        """创建押注（扣款）记录"""
        return cls._create(TransactionType.STAKE, amount, bet_after, balance_after, description, metadata)

    @classmethod
    def create_payout(cls, amount: Decimal, bet_after: Decimal, balance_after: Decimal,
                      description: str = "", metadata: Optional[Dict[str, Any]] = None) -> 'EconomyTransaction':
        """创建派彩（入账）记录"""
        return cls._create(TransactionType.PAYOUT, amount, bet_after, balance_after, description, metadata)

    @classmethod
    def create_bet_adjust(cls, delta: Decimal, bet_after: Decimal, balance_after: Decimal,
                          description: str = "") -> 'EconomyTransaction':
        """创建下注额调整记录"""
        return cls._create(TransactionType.BET_ADJUST, delta, bet_after, balance_after, description)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'transaction_id': self.transaction_id,
            'transaction_type': self.transaction_type.name,
            'amount': str(self.amount),
            'bet_after': str(self.bet_after),
            'balance_after': str(self.balance_after),
            'timestamp': self.timestamp,
            'description': self.description,
            'metadata': self.metadata,
        }
