"""
持久化模块

在会话之间尽力保存 {bet, balance}。
"""

from .types import PersistedState, PersistenceGateway, parse_persisted_state
from .stores import DEFAULT_STORAGE_KEY, InMemoryStore, JsonFileStore

__all__ = [
    'PersistedState',
    'PersistenceGateway',
    'parse_persisted_state',
    'DEFAULT_STORAGE_KEY',
    'InMemoryStore',
    'JsonFileStore',
]
