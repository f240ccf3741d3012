"""Application composition root -- wires adapters into the engine and the API.

- Reads configuration from environment variables (EngineSettings)
- Picks the storage adapter: Redis when REDIS_URL is set, in-memory otherwise
- Builds the LLM classifier only when enabled (credentials required)
- Mounts the query-understanding router onto the FastAPI app

Entry point: uvicorn sportiq.main:build_app --factory --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sportiq.brain.cache.classification_cache import ClassificationCache
from sportiq.brain.engine.understanding import QueryUnderstandingEngine
from sportiq.brain.intent.experiment import ThresholdExperiment
from sportiq.brain.intent.keywords import KeywordClassifier
from sportiq.brain.intent.llm_classifier import LLMClassifier
from sportiq.brain.memory.conversation import ConversationMemoryStore
from sportiq.brain.metrics.sli import QuerySLI
from sportiq.config import EngineSettings
from sportiq.gateway.api.understand import create_understand_router
from sportiq.gateway.app import create_app
from sportiq.infra.cache.memory import InMemoryStorageAdapter
from sportiq.infra.cache.redis import RedisStorageAdapter
from sportiq.tool.llm.gateway_adapter import LiteLLMGatewayAdapter

if TYPE_CHECKING:
    from fastapi import FastAPI
    from prometheus_client import CollectorRegistry

    from sportiq.ports.storage_port import StoragePort

logger = logging.getLogger(__name__)


def build_storage(settings: EngineSettings) -> StoragePort:
    if settings.redis_url:
        return RedisStorageAdapter(redis_url=settings.redis_url)
    return InMemoryStorageAdapter(max_entries=settings.cache_max_entries)


def build_engine(
    settings: EngineSettings,
    *,
    storage: StoragePort | None = None,
    registry: CollectorRegistry | None = None,
) -> QueryUnderstandingEngine:
    """Assemble the engine. Raises ConfigurationMissingError on missing credentials."""
    settings.require_llm_credentials()
    storage = storage or build_storage(settings)
    keywords = KeywordClassifier()

    llm_classifier: LLMClassifier | None = None
    if settings.llm_enabled:
        adapter = LiteLLMGatewayAdapter(
            default_model=settings.llm_model,
            api_key=settings.llm_api_key or None,
            base_url=settings.llm_base_url,
        )
        llm_classifier = LLMClassifier(
            adapter,
            model_id=settings.llm_model,
            timeout_s=settings.llm_timeout_s,
            keyword_classifier=keywords,
        )

    return QueryUnderstandingEngine(
        cache=ClassificationCache(storage, ttl_s=settings.classification_ttl_s),
        memory=ConversationMemoryStore(storage, ttl_s=settings.memory_ttl_s),
        llm_classifier=llm_classifier,
        keyword_classifier=keywords,
        experiment=ThresholdExperiment(settings.llm_thresholds),
        sli=QuerySLI(registry=registry),
        context_threshold=settings.context_threshold,
        fallback_order=settings.fallback_order,
    )


def build_app(
    settings: EngineSettings | None = None,
    *,
    registry: CollectorRegistry | None = None,
) -> FastAPI:
    """Build the application. This is the single composition root.

    ``registry`` defaults to the global Prometheus registry, which only
    tolerates one app per process.
    """
    settings = settings or EngineSettings.from_env()
    storage = build_storage(settings)
    engine = build_engine(settings, storage=storage, registry=registry)

    application = create_app(cors_origins=list(settings.cors_origins), registry=registry)
    application.state.storage = storage
    application.state.engine = engine
    application.include_router(create_understand_router(engine=engine))

    @application.on_event("shutdown")
    async def _shutdown_cleanup() -> None:
        if isinstance(storage, RedisStorageAdapter):
            try:
                await storage.close()
            except Exception:
                logger.debug("Redis close failed", exc_info=True)

    logger.info(
        "SportIQ app assembled: %d routes mounted, llm_classifier=%s, storage=%s",
        len(application.routes),
        settings.llm_enabled,
        type(storage).__name__,
    )
    return application
