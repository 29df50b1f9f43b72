"""
Store factory.

Builds the configured key-value backend.
"""

import os
import logging

from interviewiq.common.config import StorageConfig
from interviewiq.storage.base import KeyValueStore
from interviewiq.storage.file_store import JsonFileStore
from interviewiq.storage.memory import MemoryStore
from interviewiq.storage.sql_store import SQLAlchemyStore

logger = logging.getLogger(__name__)

SQLITE_PREFIX = "sqlite:///"


def create_store(config: StorageConfig) -> KeyValueStore:
    """
    Create a key-value store from configuration.

    Args:
        config: Storage section of the application config

    Returns:
        A ready-to-use store
    """
    if config.backend == "memory":
        store: KeyValueStore = MemoryStore()
    elif config.backend == "sql":
        url = config.database_url
        if url.startswith(SQLITE_PREFIX) and ":memory:" not in url:
            directory = os.path.dirname(url[len(SQLITE_PREFIX):])
            if directory:
                os.makedirs(directory, exist_ok=True)
        store = SQLAlchemyStore(url)
    else:
        store = JsonFileStore(config.data_dir)

    logger.info(f"Using {store.name} store")
    return store
