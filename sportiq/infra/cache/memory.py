"""In-process implementation of StoragePort.

- Per-entry TTL; an expired entry is never returned
- Lazy eviction: expired entries are swept only when a write pushes the
  map past its high-water mark (starts at max_entries, then doubles)
- Values are stored JSON-encoded, so callers never share mutable state
"""

from __future__ import annotations

import fnmatch
import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sportiq.ports.storage_port import StoragePort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A stored value and its absolute expiry (clock seconds, None = never)."""

    value: str
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class InMemoryStorageAdapter(StoragePort):
    """Dictionary-backed StoragePort for single-process deployments and tests.

    ``max_entries`` is a sweep trigger, not a cap: live entries are never
    dropped, so the size is bounded by write rate x TTL. After a sweep the
    next one waits until the map doubles its surviving size, keeping a map
    full of live keys from rescanning on every write.
    """

    def __init__(
        self,
        *,
        max_entries: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._max_entries = max_entries
        self._high_water = max_entries
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    async def put(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> None:
        """Store a value with optional TTL (seconds)."""
        now = self._clock()
        expires_at = now + ttl if ttl is not None else None
        self._entries[key] = CacheEntry(value=json.dumps(value), expires_at=expires_at)
        if len(self._entries) > self._high_water:
            self._sweep(now)
            self._high_water = max(self._max_entries, 2 * len(self._entries))

    async def get(self, key: str) -> Any | None:
        """Retrieve a value by key, returning None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return json.loads(entry.value)

    async def delete(self, key: str) -> None:
        """Delete a value by key (no-op if absent)."""
        self._entries.pop(key, None)

    async def list_keys(self, pattern: str) -> list[str]:
        """List live keys matching a glob pattern."""
        now = self._clock()
        return [
            key
            for key, entry in self._entries.items()
            if not entry.is_expired(now) and fnmatch.fnmatchcase(key, pattern)
        ]

    def _sweep(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Swept %d expired entries (size=%d)", len(expired), len(self._entries))
        return len(expired)
