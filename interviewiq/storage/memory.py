"""
Memory Storage Backend

Dictionary-backed store for tests and single-process development. Values
are round-tripped through JSON so the backend behaves like the persistent
ones (no shared references, non-JSON values rejected).
"""

import json
import logging
import threading
from typing import Any, Dict, Optional

from interviewiq.common.error_handling import StorageError
from interviewiq.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


class MemoryStore(KeyValueStore):
    """In-memory key-value store."""

    def __init__(self, name: str = "memory"):
        self._data: Dict[str, str] = {}
        self._lock = threading.RLock()
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def get(self, key: str) -> Optional[Any]:
        with self._lock:
            raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    async def put(self, key: str, value: Any) -> None:
        try:
            raw = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for key {key} is not JSON serializable", key=key, cause=e)
        with self._lock:
            self._data[key] = raw

    async def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
