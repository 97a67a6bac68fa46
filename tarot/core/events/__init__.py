"""
事件模块

回合引擎发布的领域事件以及投递事件的总线。

Classes:
    DomainEvent: 基础事件
    EventBus: 同步事件总线
    EventHandler: 处理器协议

Functions:
    get_event_bus / set_event_bus: 进程级事件总线
    create_function_handler: 将函数包装为处理器
"""

from .domain_events import (
    EventType,
    DomainEvent,
    RoundStartedEvent,
    PhaseChangedEvent,
    CardRevealedEvent,
    RoundSettledEvent,
    StatusMessageEvent,
    IntentRejectedEvent,
)

from .event_bus import (
    EventHandler,
    EventBus,
    get_event_bus,
    set_event_bus,
    create_function_handler,
)

__all__ = [
    "EventType",
    "DomainEvent",
    "RoundStartedEvent",
    "PhaseChangedEvent",
    "CardRevealedEvent",
    "RoundSettledEvent",
    "StatusMessageEvent",
    "IntentRejectedEvent",
    "EventHandler",
    "EventBus",
    "get_event_bus",
    "set_event_bus",
    "create_function_handler",
]
