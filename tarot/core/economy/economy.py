"""
经济系统

下注额与余额的唯一持有者。检查下注额上下限与可负担性，记录每次变更，
并在每次变更后持久化 {bet, balance}。
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional
import logging
import threading
import time

from ..exceptions import InsufficientBalanceError
from ..persistence.types import PersistedState, PersistenceGateway
from .money import MoneyLike, format_money, to_money
from .transaction import EconomyTransaction, TransactionType

__all__ = ['Economy', 'EconomySnapshot', 'DEFAULT_MIN_BET', 'DEFAULT_MAX_BET',
           'DEFAULT_BET', 'DEFAULT_BALANCE']

logger = logging.getLogger(__name__)

DEFAULT_MIN_BET = Decimal("1")
DEFAULT_MAX_BET = Decimal("10")
DEFAULT_BET = Decimal("1")
DEFAULT_BALANCE = Decimal("100")


@dataclass(frozen=True)
class EconomySnapshot:
    """经济系统在某一时刻的快照"""
    bet: Decimal
    balance: Decimal
    min_bet: Decimal
    max_bet: Decimal
    transaction_count: int
    timestamp: float

    @property
    def can_start_round(self) -> bool:
        return self.bet <= self.balance


class Economy:
    """
    下注额与余额账本

    押注由 ``commit_stake`` 预先扣除，奖金由 ``apply_payout`` 入账，
    因此余额不会为负。经济系统不了解回合阶段；何时允许调整下注额由
    回合引擎决定，本类只检查上下限与可负担性。
    """

    def __init__(self,
                 bet: MoneyLike = DEFAULT_BET,
                 balance: MoneyLike = DEFAULT_BALANCE,
                 min_bet: MoneyLike = DEFAULT_MIN_BET,
                 max_bet: MoneyLike = DEFAULT_MAX_BET,
                 persistence: Optional[PersistenceGateway] = None):
        """
        初始化经济系统

        Args:
            bet: 初始下注额
            balance: 初始余额
            min_bet: 允许的最小下注额
            max_bet: 允许的最大下注额
            persistence: 可选存储，每次变更后写入

        Raises:
            ValueError: 上下限颠倒、下注额超出范围或余额为负
        """
        self._min_bet = to_money(min_bet)
        self._max_bet = to_money(max_bet)
        self._bet = to_money(bet)
        self._balance = to_money(balance)
        self._persistence = persistence
        self._transaction_history: List[EconomyTransaction] = []
        self._lock = threading.RLock()

        if self._min_bet <= 0:
            raise ValueError(f"min_bet must be positive: {self._min_bet}")
        if self._max_bet < self._min_bet:
            raise ValueError(f"max_bet {self._max_bet} is below min_bet {self._min_bet}")
        if not self.is_valid_bet(self._bet):
            raise ValueError(f"bet {self._bet} outside [{self._min_bet}, {self._max_bet}]")
        if self._balance < 0:
            raise ValueError(f"balance cannot be negative: {self._balance}")

    @classmethod
    def restore(cls,
                persistence: Optional[PersistenceGateway],
                default_bet: MoneyLike = DEFAULT_BET,
                default_balance: MoneyLike = DEFAULT_BALANCE,
                min_bet: MoneyLike = DEFAULT_MIN_BET,
                max_bet: MoneyLike = DEFAULT_MAX_BET) -> 'Economy':
        """
        从存储恢复经济系统，失败时使用默认值

        下注额超出配置范围的存储记录按格式错误处理。加载错误会被吞掉。

        Args:
            persistence: 读取（以及之后写入）的存储
            default_bet: 没有可用存储时的下注额
            default_balance: 没有可用存储时的余额
            min_bet: 允许的最小下注额
            max_bet: 允许的最大下注额

        Returns:
            Economy: 恢复或默认的经济系统
        """
        stored: Optional[PersistedState] = None
        if persistence is not None:
            try:
                stored = persistence.load()
            except Exception as e:
                logger.warning(f"[Economy] loading saved state failed, using defaults: {e}")

        if stored is not None:
            low, high = to_money(min_bet), to_money(max_bet)
            if low <= stored.bet <= high and stored.balance >= 0:
                logger.info(f"[Economy] restored bet={format_money(stored.bet)} "
                            f"balance={format_money(stored.balance)}")
                return cls(stored.bet, stored.balance, min_bet, max_bet, persistence)
            logger.warning(f"[Economy] saved bet {stored.bet} outside [{low}, {high}], using defaults")

        return cls(default_bet, default_balance, min_bet, max_bet, persistence)

    @property
    def bet(self) -> Decimal:
        with self._lock:
            return self._bet

    @property
    def balance(self) -> Decimal:
        with self._lock:
            return self._balance

    @property
    def min_bet(self) -> Decimal:
        return self._min_bet

    @property
    def max_bet(self) -> Decimal:
        return self._max_bet

    def is_valid_bet(self, bet: Decimal) -> bool:
        return self._min_bet <= bet <= self._max_bet

    def can_start_round(self) -> bool:
        """当前下注额可负担时为 True"""
        with self._lock:
            return self._bet <= self._balance

    def can_adjust_bet(self, delta: MoneyLike) -> bool:
        """``adjust_bet(delta)`` 是否会被接受"""
        with self._lock:
            new_bet = self._bet + to_money(delta)
            return self.is_valid_bet(new_bet) and new_bet <= self._balance

    def adjust_bet(self, delta: MoneyLike) -> bool:
        """
        按 ``delta`` 调整下注额

        Args:
            delta: 加到下注额上的有符号金额

        Returns:
            bool: 新下注额超出 [min_bet, max_bet] 或超过余额时返回 False（不做修改）
        """
        delta = to_money(delta)
        with self._lock:
            new_bet = self._bet + delta
            if not self.is_valid_bet(new_bet):
                logger.debug(f"[Economy] bet {new_bet} outside [{self._min_bet}, {self._max_bet}], rejected")
                return False
            if new_bet > self._balance:
                logger.debug(f"[Economy] bet {new_bet} exceeds balance {self._balance}, rejected")
                return False

            self._bet = new_bet
            self._record(EconomyTransaction.create_bet_adjust(
                delta, self._bet, self._balance, f"bet changed to {format_money(self._bet)}"))
        self._persist()
        return True

    def commit_stake(self, round_id: Optional[str] = None) -> Decimal:
        """
        回合开始时从余额中扣除下注额

        Returns:
            Decimal: 扣除的押注

        Raises:
            InsufficientBalanceError: 下注额超过余额
        """
        with self._lock:
            if self._bet > self._balance:
                raise InsufficientBalanceError(
                    f"cannot stake {format_money(self._bet)} with balance {format_money(self._balance)}")
            stake = self._bet
            self._balance -= stake
            self._record(EconomyTransaction.create_stake(
                stake, self._bet, self._balance, "round stake",
                metadata={'round_id': round_id} if round_id else None))
        self._persist()
        return stake

    def apply_payout(self, amount: MoneyLike, round_id: Optional[str] = None) -> None:
        """
        结算派彩入账。允许为0，且同样会记录

        Raises:
            ValueError: amount 为负数
        """
        amount = to_money(amount)
        if amount < 0:
            raise ValueError(f"payout cannot be negative: {amount}")
        with self._lock:
            self._balance += amount
            self._record(EconomyTransaction.create_payout(
                amount, self._bet, self._balance, "round payout",
                metadata={'round_id': round_id} if round_id else None))
        self._persist()

    def snapshot(self) -> EconomySnapshot:
        with self._lock:
            return EconomySnapshot(
                bet=self._bet,
                balance=self._balance,
                min_bet=self._min_bet,
                max_bet=self._max_bet,
                transaction_count=len(self._transaction_history),
                timestamp=time.time(),
            )

    def get_transaction_history(self, transaction_type: Optional[TransactionType] = None) -> List[EconomyTransaction]:
        """
        账本记录，按时间从早到晚

        Args:
            transaction_type: 可选的类型过滤
        """
        with self._lock:
            if transaction_type is None:
                return self._transaction_history.copy()
            return [t for t in self._transaction_history if t.transaction_type is transaction_type]

    def validate_invariants(self) -> bool:
        """检查下注额上下限以及余额非负"""
        with self._lock:
            return self.is_valid_bet(self._bet) and self._balance >= 0

    def _record(self, transaction: EconomyTransaction) -> None:
        self._transaction_history.append(transaction)

    def _persist(self) -> None:
        if self._persistence is None:
            return
        try:
            self._persistence.save(PersistedState(bet=self._bet, balance=self._balance))
        except Exception as e:
            logger.warning(f"[Economy] saving state failed, keeping in-memory values: {e}")
