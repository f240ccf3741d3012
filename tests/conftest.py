"""Root conftest - shared fixtures for all test layers.

Markers:
    @pytest.mark.unit       - No external deps
"""

from __future__ import annotations

import os

# Use litellm's bundled model cost map instead of fetching it over the network at
# import time; the fetch failure path intermittently deadlocks test collection offline.
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")

import pytest
from prometheus_client import CollectorRegistry

from sportiq.brain.cache.classification_cache import ClassificationCache
from sportiq.brain.memory.conversation import ConversationMemoryStore
from sportiq.brain.metrics.sli import QuerySLI
from sportiq.infra.cache.memory import InMemoryStorageAdapter
from tests.fakes import ManualClock


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def storage(clock: ManualClock) -> InMemoryStorageAdapter:
    """In-memory StoragePort driven by the manual clock."""
    return InMemoryStorageAdapter(clock=clock)


@pytest.fixture
def classification_cache(storage: InMemoryStorageAdapter) -> ClassificationCache:
    return ClassificationCache(storage)


@pytest.fixture
def memory_store(storage: InMemoryStorageAdapter, clock: ManualClock) -> ConversationMemoryStore:
    return ConversationMemoryStore(storage, clock=clock)


@pytest.fixture
def registry() -> CollectorRegistry:
    """Isolated Prometheus registry per test."""
    return CollectorRegistry()


@pytest.fixture
def sli(registry: CollectorRegistry) -> QuerySLI:
    return QuerySLI(registry=registry)
