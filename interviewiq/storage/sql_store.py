"""
SQL Storage Backend

Stores key-value records in a single SQLAlchemy table. The engine is
synchronous; each call runs in a worker thread so the event loop never
blocks on database I/O.
"""

import json
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import Column, DateTime, MetaData, String, Text, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from interviewiq.common.error_handling import StorageError
from interviewiq.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

convention = {
    "ix": "ix_%(column_0_label)s",
    "pk": "pk_%(table_name)s"
}

Base = declarative_base(metadata=MetaData(naming_convention=convention))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KeyValueRecord(Base):
    """One stored key and its JSON payload."""
    __tablename__ = "kv_records"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class SQLAlchemyStore(KeyValueStore):
    """
    SQLAlchemy-backed key-value store.

    Args:
        database_url: SQLAlchemy database URL
        echo: Whether to echo SQL statements
    """

    def __init__(self, database_url: str, echo: bool = False):
        engine_kwargs = {"echo": echo, "future": True}
        if database_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
                engine_kwargs["poolclass"] = StaticPool
        self._engine = create_engine(database_url, **engine_kwargs)
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        Base.metadata.create_all(self._engine)
        logger.info(f"SQL store ready at {self._engine.url.render_as_string(hide_password=True)}")

    @property
    def name(self) -> str:
        return "sql"

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    def _get(self, key: str) -> Optional[Any]:
        with self._session_factory() as session:
            record = session.get(KeyValueRecord, key)
            return None if record is None else json.loads(record.value)

    def _put(self, key: str, payload: str) -> None:
        with self._session_factory() as session:
            record = session.get(KeyValueRecord, key)
            if record is None:
                session.add(KeyValueRecord(key=key, value=payload))
            else:
                record.value = payload
            session.commit()

    def _delete(self, key: str) -> bool:
        with self._session_factory() as session:
            record = session.get(KeyValueRecord, key)
            if record is None:
                return False
            session.delete(record)
            session.commit()
            return True

    async def get(self, key: str) -> Optional[Any]:
        try:
            return await self._run(self._get, key)
        except (SQLAlchemyError, ValueError) as e:
            raise StorageError(f"Could not read key {key}", key=key, cause=e)

    async def put(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for key {key} is not JSON serializable", key=key, cause=e)
        try:
            await self._run(self._put, key, payload)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not write key {key}", key=key, cause=e)

    async def delete(self, key: str) -> bool:
        try:
            return await self._run(self._delete, key)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not delete key {key}", key=key, cause=e)

    async def close(self) -> None:
        self._engine.dispose()
