"""
Key-value storage backends.
"""

from interviewiq.storage.base import KeyValueStore
from interviewiq.storage.memory import MemoryStore
from interviewiq.storage.file_store import JsonFileStore
from interviewiq.storage.sql_store import SQLAlchemyStore
from interviewiq.storage.factory import create_store

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "SQLAlchemyStore",
    "create_store",
]
