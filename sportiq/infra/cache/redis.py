"""Redis implementation of StoragePort.

- Shared classification cache and conversation memory across workers
- Expiry delegated to Redis (SET ... EX)
- Non-persistent cache (losable; rebuilding acceptable)
"""

from __future__ import annotations

import json
from typing import Any

import redis.asyncio as aioredis

from sportiq.ports.storage_port import StoragePort


class RedisStorageAdapter(StoragePort):
    """Redis adapter implementing the StoragePort interface.

    Keys are optionally namespaced so several deployments can share one
    Redis database; callers always see un-prefixed keys.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        *,
        namespace: str = "",
    ) -> None:
        self._redis_url = redis_url
        self._namespace = namespace
        self._client: aioredis.Redis | None = None

    async def _get_client(self) -> aioredis.Redis:
        if self._client is None:
            self._client = aioredis.from_url(self._redis_url, decode_responses=False)  # type: ignore[no-untyped-call]
        return self._client

    def _key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    async def put(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> None:
        """Store a value with optional TTL (seconds)."""
        client = await self._get_client()
        encoded = json.dumps(value).encode("utf-8")
        if ttl is not None:
            await client.set(self._key(key), encoded, ex=ttl)
        else:
            await client.set(self._key(key), encoded)

    async def get(self, key: str) -> Any | None:
        """Retrieve a value by key, returning None if absent or expired."""
        client = await self._get_client()
        raw = await client.get(self._key(key))
        if raw is None:
            return None
        return json.loads(raw)

    async def delete(self, key: str) -> None:
        """Delete a value by key (no-op if absent)."""
        client = await self._get_client()
        await client.delete(self._key(key))

    async def list_keys(self, pattern: str) -> list[str]:
        """List keys matching a glob pattern."""
        client = await self._get_client()
        raw_keys = await client.keys(self._key(pattern))
        offset = len(self._namespace)
        keys = [k.decode("utf-8") if isinstance(k, bytes) else k for k in raw_keys]
        return [k[offset:] for k in keys]

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
