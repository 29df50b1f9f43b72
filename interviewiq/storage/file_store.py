"""
JSON File Storage Backend

Persists each key as one pretty-printed JSON file in a data directory, the
layout the local development server uses for chat history and session
snapshots. Writes go through a temporary file and ``os.replace`` so a crash
never leaves a half-written record.
"""

import os
import json
import asyncio
import logging
import tempfile
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

from interviewiq.common.error_handling import StorageError
from interviewiq.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


class JsonFileStore(KeyValueStore):
    """
    File-backed key-value store.

    Args:
        data_dir: Directory holding one ``<quoted key>.json`` file per key
    """

    def __init__(self, data_dir: str):
        self._dir = Path(data_dir)
        self._lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return "file"

    @property
    def data_dir(self) -> Path:
        return self._dir

    def path_for(self, key: str) -> Path:
        return self._dir / f"{quote(key, safe='')}.json"

    async def get(self, key: str) -> Optional[Any]:
        path = self.path_for(key)
        async with self._lock:
            if not path.exists():
                return None
            try:
                with open(path, "r", encoding="utf-8") as f:
                    return json.load(f)
            except (OSError, ValueError) as e:
                raise StorageError(f"Could not read {path}", key=key, cause=e)

    async def put(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        try:
            payload = json.dumps(value, indent=2)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for key {key} is not JSON serializable", key=key, cause=e)

        async with self._lock:
            tmp_path = None
            try:
                self._dir.mkdir(parents=True, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(dir=self._dir, suffix=".tmp")
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_path, path)
            except OSError as e:
                if tmp_path is not None and os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise StorageError(f"Could not write {path}", key=key, cause=e)
        logger.debug(f"Stored {key} in {path}")

    async def delete(self, key: str) -> bool:
        path = self.path_for(key)
        async with self._lock:
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            except OSError as e:
                raise StorageError(f"Could not delete {path}", key=key, cause=e)
        return True
