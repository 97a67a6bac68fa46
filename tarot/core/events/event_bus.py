"""
事件总线

引擎通知的同步发布/订阅。处理器在调用方线程上按发布顺序执行；
某个处理器失败只记录日志，不影响其他处理器。
"""

from __future__ import annotations
from typing import Protocol, Dict, List, Callable, Optional
from collections import defaultdict
import logging
import threading

from .domain_events import DomainEvent, EventType


class EventHandler(Protocol):
    """事件处理器协议"""

    def handle(self, event: DomainEvent) -> None:
        ...

    def can_handle(self, event_type: EventType) -> bool:
        ...


class EventBus:
    """
    事件总线

    保留有上限的已发布事件历史，便于测试和 CLI 查看发生了什么。
    """

    def __init__(self, max_history_size: int = 1000):
        self._handlers: Dict[EventType, List[EventHandler]] = defaultdict(list)
        self._global_handlers: List[EventHandler] = []
        self._event_history: List[DomainEvent] = []
        self._max_history_size = max_history_size
        self._lock = threading.RLock()
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """
        订阅单个事件类型

        Args:
            event_type: 事件类型
            handler: 事件处理器
        """
        with self._lock:
            self._handlers[event_type].append(handler)
            self._logger.debug(f"Handler {handler.__class__.__name__} subscribed to {event_type.name}")

    def subscribe_all(self, handler: EventHandler) -> None:
        """订阅所有事件类型"""
        with self._lock:
            self._global_handlers.append(handler)
            self._logger.debug(f"Handler {handler.__class__.__name__} subscribed to all events")

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> bool:
        """
        从某个事件类型移除处理器

        Returns:
            bool: 该处理器之前是否已订阅
        """
        with self._lock:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)
                self._logger.debug(f"Handler {handler.__class__.__name__} unsubscribed from {event_type.name}")
                return True
            return False

    def unsubscribe_all(self, handler: EventHandler) -> bool:
        with self._lock:
            if handler in self._global_handlers:
                self._global_handlers.remove(handler)
                return True
            return False

    def publish(self, event: DomainEvent) -> None:
        """
        向处理器发布事件

        Args:
            event: 要发布的事件
        """
        with self._lock:
            self._add_to_history(event)
            specific_handlers = self._handlers[event.event_type][:]
            global_handlers = self._global_handlers[:]

        self._logger.debug(f"Publishing event {event.event_type.name} with ID {event.event_id}")

        for handler in specific_handlers + global_handlers:
            try:
                if hasattr(handler, 'can_handle') and not handler.can_handle(event.event_type):
                    continue
                handler.handle(event)
            except Exception as e:
                self._logger.error(f"Error in handler {handler.__class__.__name__}: {e}")

    def _add_to_history(self, event: DomainEvent) -> None:
        self._event_history.append(event)
        if len(self._event_history) > self._max_history_size:
            self._event_history.pop(0)

    def get_event_history(self,
                          event_type: Optional[EventType] = None,
                          aggregate_id: Optional[str] = None,
                          limit: Optional[int] = None) -> List[DomainEvent]:
        """
        已发布的事件，按时间从早到晚

        Args:
            event_type: 按事件类型过滤
            aggregate_id: 按引擎ID过滤
            limit: 只保留最近 N 个

        Returns:
            List[DomainEvent]: 匹配的事件
        """
        with self._lock:
            events = self._event_history[:]

        if event_type:
            events = [e for e in events if e.event_type == event_type]
        if aggregate_id:
            events = [e for e in events if e.aggregate_id == aggregate_id]

        if limit:
            events = events[-limit:]

        return events

    def clear_history(self) -> None:
        with self._lock:
            self._event_history.clear()

    def get_handler_count(self, event_type: Optional[EventType] = None) -> int:
        """
        已订阅的处理器数量

        Args:
            event_type: 事件类型，None 表示全局处理器
        """
        with self._lock:
            if event_type is None:
                return len(self._global_handlers)
            return len(self._handlers[event_type])


def create_function_handler(func: Callable[[DomainEvent], None],
                            event_types: Optional[List[EventType]] = None) -> EventHandler:
    """
    将普通函数包装为事件处理器

    Args:
        func: 处理函数
        event_types: 接受的事件类型，None 表示全部

    Returns:
        EventHandler: 处理器
    """
    class FunctionHandler:
        def handle(self, event: DomainEvent) -> None:
            func(event)

        def can_handle(self, event_type: EventType) -> bool:
            return event_types is None or event_type in event_types

    return FunctionHandler()


_global_event_bus: Optional[EventBus] = None


def get_event_bus() -> EventBus:
    """进程级事件总线，首次使用时创建"""
    global _global_event_bus
    if _global_event_bus is None:
        _global_event_bus = EventBus()
    return _global_event_bus


def set_event_bus(event_bus: Optional[EventBus]) -> None:
    """替换（传入 None 时重置）进程级事件总线"""
    global _global_event_bus
    _global_event_bus = event_bus
