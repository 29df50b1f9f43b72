"""
Base Storage Module

Defines the key-value store interface every InterviewIQ component persists
through. Values are JSON-compatible structures (dicts, lists, scalars).
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class KeyValueStore(ABC):
    """
    Abstract key-value store.

    Implementations must hand out values that callers can mutate freely
    without affecting the stored copy.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short backend name used in logs."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Read a value.

        Args:
            key: Storage key

        Returns:
            The stored value, or None when the key is absent
        """
        pass

    @abstractmethod
    async def put(self, key: str, value: Any) -> None:
        """
        Write a value, replacing any previous one.

        Args:
            key: Storage key
            value: JSON-compatible value
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed
        """
        pass

    async def close(self) -> None:
        """Release backend resources."""
        return None
