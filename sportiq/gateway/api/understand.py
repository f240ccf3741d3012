"""Query understanding REST API endpoints.

- POST   /api/v1/understand                      -> classification + routing
- POST   /api/v1/resolve-pronouns                -> pronoun resolution only
- POST   /api/v1/expand-query                    -> player query expansion
- GET    /api/v1/sessions/{id}/history           -> rendered conversation history
- DELETE /api/v1/admin/memory/{id}               -> forget a session
- DELETE /api/v1/admin/classification-cache      -> drop cached classifications
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter
from pydantic import BaseModel, field_validator

from sportiq.brain.entities.expansion import expand_query
from sportiq.shared.types import QueryUnderstanding, category_label

if TYPE_CHECKING:
    from sportiq.brain.engine.understanding import QueryUnderstandingEngine

logger = logging.getLogger(__name__)


def _not_blank(v: str, what: str) -> str:
    if not v or not v.strip():
        msg = f"{what} cannot be empty"
        raise ValueError(msg)
    return v.strip()


class UnderstandRequest(BaseModel):
    """Request model for understanding a query."""

    query: str
    session_id: str | None = None
    variant: str | None = None

    @field_validator("query")
    @classmethod
    def query_not_empty(cls, v: str) -> str:
        return _not_blank(v, "Query")


class ResolvePronounsRequest(BaseModel):
    session_id: str
    query: str

    @field_validator("session_id", "query")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _not_blank(v, "Field")


class ExpandQueryRequest(BaseModel):
    query: str

    @field_validator("query")
    @classmethod
    def query_not_empty(cls, v: str) -> str:
        return _not_blank(v, "Query")


class EntityItem(BaseModel):
    type: str
    name: str
    confidence: float
    sport: str | None = None
    league: str | None = None


class RoutingItem(BaseModel):
    source: str
    recency: str
    confidence: float
    reason: str


class ClarificationItem(BaseModel):
    place: str
    team: str
    league: str
    sport: str


class UnderstandResponse(BaseModel):
    """Response model for an understood (or ambiguous) query."""

    intent: str
    intent_label: str
    sport: str
    confidence: float
    entities: list[EntityItem]
    needs_realtime: bool
    needs_api_data: bool
    is_betting_related: bool
    reasoning: str | None = None
    routing: RoutingItem | None = None
    original_query: str
    resolved_query: str
    time_frame: str
    alternative_intents: list[str]
    is_ambiguous: bool
    clarifying_question: str | None = None
    clarification_candidates: list[ClarificationItem]
    pattern_matched: str | None = None
    used_llm: bool
    used_memory: bool
    cache_hit: bool
    cohort: str | None = None

    @classmethod
    def from_understanding(cls, result: QueryUnderstanding) -> UnderstandResponse:
        routing = result.routing
        return cls(
            intent=result.intent.value,
            intent_label=category_label(result.intent),
            sport=result.sport.value,
            confidence=result.confidence,
            entities=[EntityItem(**e.to_dict()) for e in result.entities],
            needs_realtime=result.needs_realtime,
            needs_api_data=result.needs_api_data,
            is_betting_related=result.is_betting_related,
            reasoning=result.classification.reasoning,
            routing=RoutingItem(**routing.to_dict()) if routing else None,
            original_query=result.original_query,
            resolved_query=result.resolved_query,
            time_frame=result.time_frame.value,
            alternative_intents=[i.value for i in result.alternative_intents],
            is_ambiguous=result.is_ambiguous,
            clarifying_question=result.clarifying_question,
            clarification_candidates=[
                ClarificationItem(**c.to_dict()) for c in result.clarification_candidates
            ],
            pattern_matched=result.pattern_matched,
            used_llm=result.used_llm,
            used_memory=result.used_memory,
            cache_hit=result.cache_hit,
            cohort=result.cohort,
        )


class ResolvePronounsResponse(BaseModel):
    resolved_query: str
    used_memory: bool


class ExpandQueryResponse(BaseModel):
    expanded_query: str
    player: str | None = None


class HistoryResponse(BaseModel):
    session_id: str
    history: str


class CacheClearedResponse(BaseModel):
    deleted: int


def create_understand_router(*, engine: QueryUnderstandingEngine) -> APIRouter:
    """Create the query API router with injected engine dependency."""
    router = APIRouter(prefix="/api/v1", tags=["understand"])

    @router.post("/understand", response_model=UnderstandResponse)
    async def understand(body: UnderstandRequest) -> UnderstandResponse:
        result = await engine.understand(
            body.query,
            session_id=body.session_id,
            variant=body.variant,
        )
        return UnderstandResponse.from_understanding(result)

    @router.post("/resolve-pronouns", response_model=ResolvePronounsResponse)
    async def resolve_pronouns(body: ResolvePronounsRequest) -> ResolvePronounsResponse:
        resolution = await engine.resolve_pronouns(body.session_id, body.query)
        return ResolvePronounsResponse(
            resolved_query=resolution.resolved_query,
            used_memory=resolution.used_memory,
        )

    @router.post("/expand-query", response_model=ExpandQueryResponse)
    async def expand(body: ExpandQueryRequest) -> ExpandQueryResponse:
        expansion = expand_query(body.query)
        return ExpandQueryResponse(
            expanded_query=expansion.expanded_query,
            player=expansion.player.name if expansion.player else None,
        )

    @router.get("/sessions/{session_id}/history", response_model=HistoryResponse)
    async def history(session_id: str) -> HistoryResponse:
        return HistoryResponse(
            session_id=session_id,
            history=await engine.conversation_history(session_id),
        )

    @router.delete("/admin/memory/{session_id}", status_code=204)
    async def clear_memory(session_id: str) -> None:
        await engine.clear_memory(session_id)
        logger.info("Admin cleared memory session=%s", session_id)

    @router.delete("/admin/classification-cache", response_model=CacheClearedResponse)
    async def clear_classification_cache() -> CacheClearedResponse:
        deleted = await engine.clear_classification_cache()
        logger.info("Admin cleared classification cache entries=%d", deleted)
        return CacheClearedResponse(deleted=deleted)

    return router
