"""
查询服务

对引擎的只读访问：快照、赔付表、倍率表分析与回合历史。
"""

from typing import Any, Dict, List, Optional

from ..core.economy.transaction import EconomyTransaction, TransactionType
from ..core.events import DomainEvent, EventBus, EventType
from ..core.multipliers.analysis import TableAnalysis, analyze_table
from ..core.multipliers.types import MultiplierTable
from .dto import EngineSnapshot, PayTableRow, RoundResult
from .round_engine import RoundEngine
from .types import QueryResult


def build_pay_table(table: MultiplierTable) -> List[PayTableRow]:
    """每个表条目一行，按表顺序"""
    return [
        PayTableRow(
            value=entry.value,
            chance=entry.chance,
            probability=table.probability_of(entry),
            rarity=entry.rarity,
        )
        for entry in table
    ]


class RoundQueryService:
    """单个回合引擎的查询服务"""

    def __init__(self, engine: RoundEngine, event_bus: Optional[EventBus] = None):
        self._engine = engine
        self._event_bus = event_bus or engine.event_bus
        self._analysis: Optional[TableAnalysis] = None

    def get_snapshot(self) -> QueryResult[EngineSnapshot]:
        try:
            return QueryResult.success_result(self._engine.snapshot())
        except Exception as e:
            return QueryResult.failure_result(
                f"failed to build snapshot: {e}",
                error_code="GET_SNAPSHOT_FAILED"
            )

    def get_pay_table(self) -> QueryResult[List[PayTableRow]]:
        return QueryResult.success_result(build_pay_table(self._engine.table))

    def get_table_analysis(self) -> QueryResult[TableAnalysis]:
        """引擎倍率表的精确 RTP 统计，只计算一次"""
        if self._analysis is None:
            self._analysis = analyze_table(self._engine.table)
        return QueryResult.success_result(self._analysis)

    def get_last_result(self) -> QueryResult[RoundResult]:
        result = self._engine.last_result
        if result is None:
            return QueryResult.failure_result("no round has been settled yet", error_code="NO_RESULT")
        return QueryResult.success_result(result)

    def get_round_history(self, limit: Optional[int] = None) -> QueryResult[List[RoundResult]]:
        history = self._engine.round_history
        if limit:
            history = history[-limit:]
        return QueryResult.success_result(history)

    def get_transactions(self, transaction_type: Optional[TransactionType] = None) -> QueryResult[List[EconomyTransaction]]:
        return QueryResult.success_result(self._engine.economy.get_transaction_history(transaction_type))

    def get_session_stats(self) -> QueryResult[Dict[str, Any]]:
        """历史中已结算回合的汇总"""
        history = self._engine.round_history
        total_bet = sum((r.bet for r in history), start=0)
        total_payout = sum((r.payout for r in history), start=0)
        wins = sum(1 for r in history if r.is_win)
        return QueryResult.success_result({
            'rounds': len(history),
            'wins': wins,
            'total_bet': total_bet,
            'total_payout': total_payout,
            'net': total_payout - total_bet,
            'observed_return': (total_payout / total_bet) if total_bet else None,
            'balance': self._engine.economy.balance,
        })

    def get_events(self, event_type: Optional[EventType] = None, limit: Optional[int] = None) -> QueryResult[List[DomainEvent]]:
        return QueryResult.success_result(self._event_bus.get_event_history(
            event_type=event_type, aggregate_id=self._engine.engine_id, limit=limit))
