"""
持久化网关实现

两种存储都是尽力而为：I/O 和解码问题只记录日志并吞掉，
从不抛给引擎。
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .types import PersistedState, parse_persisted_state

__all__ = ['DEFAULT_STORAGE_KEY', 'InMemoryStore', 'JsonFileStore']

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "tarot_state"


class InMemoryStore:
    """在内存中保存最近一次写入的记录，用于测试与模拟"""

    def __init__(self, initial: Optional[PersistedState] = None):
        self._state = initial
        self.save_count = 0

    def load(self) -> Optional[PersistedState]:
        return self._state

    def save(self, state: PersistedState) -> None:
        self._state = state
        self.save_count += 1

    def clear(self) -> None:
        self._state = None


class JsonFileStore:
    """
    键值 JSON 文件，每个键一条记录

    文件保存一个从存储键到记录的映射对象，多个游戏（或配置档）
    可以像浏览器共享本地存储一样共用一个文件。

    Args:
        path: 文件位置；保存时会创建父目录
        key: 本游戏记录的存储键
    """

    def __init__(self, path: Union[str, Path], key: str = DEFAULT_STORAGE_KEY):
        self._path = Path(path)
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> Optional[PersistedState]:
        document = self._read_document()
        if document is None:
            return None
        state = parse_persisted_state(document.get(self._key))
        if state is None:
            logger.info(f"[Storage] no usable record under '{self._key}' in {self._path}")
        return state

    def save(self, state: PersistedState) -> None:
        document = self._read_document() or {}
        document[self._key] = state.to_dict()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(document, indent=2, sort_keys=True), encoding='utf-8')
            tmp_path.replace(self._path)
        except OSError as e:
            logger.warning(f"[Storage] failed to save {self._path}: {e}")

    def _read_document(self) -> Optional[Dict[str, Any]]:
        try:
            text = self._path.read_text(encoding='utf-8')
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"[Storage] failed to read {self._path}: {e}")
            return None

        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(f"[Storage] ignoring corrupt file {self._path}: {e}")
            return None

        if not isinstance(document, dict):
            logger.warning(f"[Storage] ignoring {self._path}: top level is not an object")
            return None
        return document

    def keys(self) -> List[str]:
        document = self._read_document() or {}
        return sorted(document.keys())
