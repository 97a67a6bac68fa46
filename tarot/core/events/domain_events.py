"""
领域事件 - 回合引擎通知

表现层订阅这些事件，而不是读取引擎字段。
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional
from enum import Enum, auto
import time
import uuid


class EventType(Enum):
    """回合引擎发布的事件类型"""
    # 回合生命周期
    ROUND_STARTED = auto()
    PHASE_CHANGED = auto()
    CARD_REVEALED = auto()
    ROUND_SETTLED = auto()

    # 经济
    BET_CHANGED = auto()
    BALANCE_CHANGED = auto()

    # 模式
    SPEED_CHANGED = auto()
    AUTO_PLAY_STARTED = auto()
    AUTO_PLAY_STOP_REQUESTED = auto()
    AUTO_PLAY_FINISHED = auto()

    # 状态栏 / 被拒绝的输入
    STATUS_MESSAGE = auto()
    INTENT_REJECTED = auto()


@dataclass(frozen=True)
class DomainEvent:
    """
    基础领域事件

    Attributes:
        event_id: 唯一事件ID
        event_type: 事件类型
        aggregate_id: 事件所属的引擎ID
        timestamp: 创建时间
        data: 可序列化为 JSON 的事件数据
        version: 数据版本
        correlation_id: 事件属于某回合时为回合ID
    """
    event_id: str
    event_type: EventType
    aggregate_id: str
    timestamp: float
    data: Dict[str, Any]
    version: int = 1
    correlation_id: Optional[str] = None

    @classmethod
    def create(
        cls,
        event_type: EventType,
        aggregate_id: str,
        data: Dict[str, Any],
        correlation_id: Optional[str] = None
    ) -> DomainEvent:
        """
        创建领域事件的工厂方法

        Args:
            event_type: 事件类型
            aggregate_id: 引擎ID
            data: 事件数据
            correlation_id: 可选的回合ID

        Returns:
            DomainEvent: 新事件
        """
        return cls(
            event_id=str(uuid.uuid4()),
            event_type=event_type,
            aggregate_id=aggregate_id,
            timestamp=time.time(),
            data=data,
            correlation_id=correlation_id
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'event_id': self.event_id,
            'event_type': self.event_type.name,
            'aggregate_id': self.aggregate_id,
            'timestamp': self.timestamp,
            'data': self.data,
            'version': self.version,
            'correlation_id': self.correlation_id
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> DomainEvent:
        return cls(
            event_id=data['event_id'],
            event_type=EventType[data['event_type']],
            aggregate_id=data['aggregate_id'],
            timestamp=data['timestamp'],
            data=data['data'],
            version=data.get('version', 1),
            correlation_id=data.get('correlation_id')
        )


def _money(value: Decimal) -> str:
    return str(value)


@dataclass(frozen=True)
class RoundStartedEvent(DomainEvent):
    """押注已提交，三个倍率已分配"""

    @classmethod
    def create(
        cls,
        engine_id: str,
        round_id: str,
        bet: Decimal,
        balance: Decimal,
        auto_play: bool,
    ) -> RoundStartedEvent:
        data = {
            'round_id': round_id,
            'bet': _money(bet),
            'balance': _money(balance),
            'auto_play': auto_play,
        }
        base_event = DomainEvent.create(EventType.ROUND_STARTED, engine_id, data, round_id)
        return cls(**base_event.__dict__)


@dataclass(frozen=True)
class PhaseChangedEvent(DomainEvent):
    """回合阶段转换"""

    @classmethod
    def create(
        cls,
        engine_id: str,
        from_phase: str,
        to_phase: str,
        round_id: Optional[str] = None,
    ) -> PhaseChangedEvent:
        data = {
            'from_phase': from_phase,
            'to_phase': to_phase,
        }
        base_event = DomainEvent.create(EventType.PHASE_CHANGED, engine_id, data, round_id)
        return cls(**base_event.__dict__)


@dataclass(frozen=True)
class CardRevealedEvent(DomainEvent):
    """一张卡牌被翻开"""

    @classmethod
    def create(
        cls,
        engine_id: str,
        round_id: str,
        slot: int,
        value: Decimal,
        rarity: str,
        reveal_index: int,
    ) -> CardRevealedEvent:
        data = {
            'slot': slot,
            'value': _money(value),
            'rarity': rarity,
            'reveal_index': reveal_index,
        }
        base_event = DomainEvent.create(EventType.CARD_REVEALED, engine_id, data, round_id)
        return cls(**base_event.__dict__)


@dataclass(frozen=True)
class RoundSettledEvent(DomainEvent):
    """回合结算"""

    @classmethod
    def create(
        cls,
        engine_id: str,
        round_id: str,
        bet: Decimal,
        multipliers: List[Decimal],
        product: Decimal,
        payout: Decimal,
        balance_after: Decimal,
    ) -> RoundSettledEvent:
        data = {
            'bet': _money(bet),
            'multipliers': [_money(v) for v in multipliers],
            'product': _money(product),
            'payout': _money(payout),
            'balance_after': _money(balance_after),
        }
        base_event = DomainEvent.create(EventType.ROUND_SETTLED, engine_id, data, round_id)
        return cls(**base_event.__dict__)


@dataclass(frozen=True)
class StatusMessageEvent(DomainEvent):
    """状态栏文本"""

    @classmethod
    def create(
        cls,
        engine_id: str,
        message: str,
        round_id: Optional[str] = None,
    ) -> StatusMessageEvent:
        base_event = DomainEvent.create(EventType.STATUS_MESSAGE, engine_id, {'message': message}, round_id)
        return cls(**base_event.__dict__)


@dataclass(frozen=True)
class IntentRejectedEvent(DomainEvent):
    """用户意图被忽略"""

    @classmethod
    def create(
        cls,
        engine_id: str,
        intent: str,
        phase: str,
        reason: str,
        round_id: Optional[str] = None,
    ) -> IntentRejectedEvent:
        data = {
            'intent': intent,
            'phase': phase,
            'reason': reason,
        }
        base_event = DomainEvent.create(EventType.INTENT_REJECTED, engine_id, data, round_id)
        return cls(**base_event.__dict__)
