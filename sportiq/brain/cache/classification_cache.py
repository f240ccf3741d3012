"""Classification cache on top of StoragePort.

Key: ``query-intel:`` + normalized query text, plus ``|cohort=<name>``
when an experiment is active. Entries live for 300 s by default. Storage
failures degrade to a miss (or a skipped write) rather than failing the
request.
"""

from __future__ import annotations

import logging

from sportiq.ports.storage_port import StoragePort
from sportiq.shared.logging.error_handler import log_structured_error
from sportiq.shared.text import normalize_query
from sportiq.shared.types import QueryUnderstanding

logger = logging.getLogger(__name__)

CACHE_PREFIX = "query-intel:"
DEFAULT_TTL_S = 300


def cache_key(query: str, cohort: str | None = None) -> str:
    key = f"{CACHE_PREFIX}{normalize_query(query)}"
    if cohort:
        key = f"{key}|cohort={cohort}"
    return key


class ClassificationCache:
    def __init__(self, storage: StoragePort, *, ttl_s: int = DEFAULT_TTL_S) -> None:
        self._storage = storage
        self._ttl_s = ttl_s

    async def get(self, query: str, cohort: str | None = None) -> QueryUnderstanding | None:
        key = cache_key(query, cohort)
        try:
            raw = await self._storage.get(key)
        except Exception as exc:
            log_structured_error(logger, exc, stage="cache_get", context={"key": key})
            return None
        if raw is None:
            return None
        try:
            return QueryUnderstanding.from_dict(raw)
        except (KeyError, TypeError, ValueError) as exc:
            log_structured_error(logger, exc, stage="cache_decode", context={"key": key})
            await self._storage.delete(key)
            return None

    async def put(
        self, query: str, understanding: QueryUnderstanding, cohort: str | None = None
    ) -> None:
        key = cache_key(query, cohort)
        try:
            await self._storage.put(key, understanding.to_dict(), ttl=self._ttl_s)
        except Exception as exc:
            log_structured_error(logger, exc, stage="cache_put", context={"key": key})

    async def clear(self) -> int:
        """Drop every cached classification; returns how many were removed."""
        keys = await self._storage.list_keys(f"{CACHE_PREFIX}*")
        for key in keys:
            await self._storage.delete(key)
        logger.info("Classification cache cleared entries=%d", len(keys))
        return len(keys)
