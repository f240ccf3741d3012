"""StoragePort - Key-value persistence interface.

Backs the classification cache and conversation memory. Values must be
JSON-serializable; every entry may carry its own TTL.
Day-1 implementation: in-process TTL map (InMemoryStorageAdapter).
Real implementation: Redis (RedisStorageAdapter).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class StoragePort(ABC):
    """Port: key-value read/write with per-entry expiry."""

    @abstractmethod
    async def put(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> None:
        """Store a value with optional TTL.

        Args:
            key: Storage key.
            value: Value to store (must be JSON-serializable).
            ttl: Time-to-live in seconds (None = no expiry).
        """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Retrieve a value by key.

        Args:
            key: Storage key.

        Returns:
            Stored value, or None if absent or expired. Never an expired value.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a value by key (no-op if absent).

        Args:
            key: Storage key.
        """

    @abstractmethod
    async def list_keys(self, pattern: str) -> list[str]:
        """List live keys matching a pattern.

        Args:
            pattern: Glob-style pattern (e.g., "query-intel:*").

        Returns:
            List of matching keys.
        """
