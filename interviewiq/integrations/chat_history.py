"""
Assistant Chat History

Saved assistant conversations, stored as one list in the key-value store
and upserted by conversation ID.
"""

import uuid
import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from interviewiq.common.locks import KeyedLock
from interviewiq.common.serialization import format_timestamp, parse_timestamp, utc_now
from interviewiq.storage.base import KeyValueStore

CHAT_HISTORY_KEY = "chat_history"


@dataclass
class ChatMessage:
    role: str
    content: str
    timestamp: datetime.datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content, "timestamp": format_timestamp(self.timestamp)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChatMessage':
        return cls(
            role=data["role"],
            content=data.get("content", ""),
            timestamp=parse_timestamp(data.get("timestamp")) or utc_now(),
        )


@dataclass
class ChatHistory:
    """One saved conversation."""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    title: str = "New conversation"
    messages: List[ChatMessage] = field(default_factory=list)
    created_at: datetime.datetime = field(default_factory=utc_now)
    updated_at: datetime.datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "messages": [m.to_dict() for m in self.messages],
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChatHistory':
        created = parse_timestamp(data.get("createdAt")) or utc_now()
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "New conversation",
            messages=[ChatMessage.from_dict(m) for m in data.get("messages", [])],
            created_at=created,
            updated_at=parse_timestamp(data.get("updatedAt")) or created,
        )


class ChatHistoryRepository:
    """
    Stores assistant conversations.

    Args:
        store: Key-value store holding the conversation list
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._locks = KeyedLock()

    async def _load_all(self) -> List[ChatHistory]:
        return [ChatHistory.from_dict(item) for item in await self.store.get(CHAT_HISTORY_KEY) or []]

    async def _save_all(self, histories: List[ChatHistory]) -> None:
        await self.store.put(CHAT_HISTORY_KEY, [h.to_dict() for h in histories])

    async def list(self) -> List[ChatHistory]:
        return await self._load_all()

    async def get(self, history_id: str) -> Optional[ChatHistory]:
        for history in await self._load_all():
            if history.id == history_id:
                return history
        return None

    async def _upsert(self, history: ChatHistory) -> ChatHistory:
        histories = await self._load_all()
        for index, existing in enumerate(histories):
            if existing.id == history.id:
                histories[index] = history
                break
        else:
            histories.append(history)
        await self._save_all(histories)
        return history

    async def save(self, history: ChatHistory) -> ChatHistory:
        """Insert the conversation, or replace the one with the same ID."""
        async with self._locks.hold(CHAT_HISTORY_KEY):
            return await self._upsert(history)

    async def delete(self, history_id: str) -> bool:
        async with self._locks.hold(CHAT_HISTORY_KEY):
            histories = await self._load_all()
            remaining = [h for h in histories if h.id != history_id]
            if len(remaining) == len(histories):
                return False
            await self._save_all(remaining)
        return True

    async def append_exchange(self, history_id: Optional[str], prompt: str, reply: str) -> ChatHistory:
        """
        Add a user prompt and the assistant's reply to a conversation,
        starting a new one when ``history_id`` is unknown or None.

        The read and the write happen under one lock so concurrent
        exchanges on the same conversation all land.
        """
        async with self._locks.hold(CHAT_HISTORY_KEY):
            history = await self.get(history_id) if history_id else None
            if history is None:
                history = ChatHistory(id=history_id or uuid.uuid4().hex, title=prompt[:60])
            now = utc_now()
            history.messages.append(ChatMessage("user", prompt, now))
            history.messages.append(ChatMessage("assistant", reply, now))
            history.updated_at = now
            return await self._upsert(history)
