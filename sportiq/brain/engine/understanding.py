"""Query understanding engine -- the per-query pipeline.

Resolve references -> cache -> extract -> clarify or classify -> route.
- Cheap local stages first; the language model only when they stay unsure
- Ambiguous place names get a clarifying question, never a guess
- Ports: StoragePort (via cache and memory), LLMCallPort (via LLMClassifier)
"""

from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from sportiq.brain.entities.extractor import EntityExtractor, detect_sport
from sportiq.brain.intent.ambiguity import (
    LOW_CONFIDENCE_HINT,
    Ambiguity,
    AmbiguityDetector,
    intent_clarifying_question,
)
from sportiq.brain.intent.classifier import NO_MATCH_CONFIDENCE, PatternIntentClassifier
from sportiq.brain.intent.experiment import ThresholdExperiment
from sportiq.brain.intent.inference import (
    INFERRED_CONFIDENCE,
    SHORT_QUERY_CONFIDENCE,
    infer_intent_from_context,
    short_match_teams,
)
from sportiq.brain.intent.keywords import KeywordClassifier
from sportiq.brain.intent.llm_classifier import DEGRADED_MAX_CONFIDENCE
from sportiq.brain.intent.signals import is_betting_related, needs_api_data, needs_realtime
from sportiq.brain.intent.timeframe import detect_time_frame
from sportiq.brain.memory.conversation import PronounResolution, format_history
from sportiq.brain.routing.router import DataSourceRouter
from sportiq.shared.errors import ValidationError
from sportiq.shared.logging.error_handler import log_structured_error
from sportiq.shared.text import normalize_query
from sportiq.shared.types import (
    ClassificationResult,
    ExtractedEntity,
    QueryIntent,
    QueryUnderstanding,
    Sport,
    TimeFrame,
    merge_entities,
)

if TYPE_CHECKING:
    from sportiq.brain.cache.classification_cache import ClassificationCache
    from sportiq.brain.intent.llm_classifier import LLMClassifier
    from sportiq.brain.memory.conversation import ConversationMemoryStore
    from sportiq.brain.metrics.sli import QuerySLI

logger = logging.getLogger(__name__)

LOCAL_FALLBACKS = ("context", "keyword")
DEFAULT_CONTEXT_THRESHOLD = 0.6

SHORT_QUERY_PATTERN = "SHORT_MATCH_QUERY"
CONTEXT_PATTERN = "CONTEXT_INFERENCE"
KEYWORD_PATTERN = "KEYWORD_FALLBACK"


@dataclass(frozen=True)
class _Draft:
    """Best local answer so far."""

    intent: QueryIntent
    confidence: float
    stage: str
    pattern: str | None = None

    def is_weak(self, threshold: float) -> bool:
        return self.intent == QueryIntent.UNCLEAR or self.confidence < threshold


class QueryUnderstandingEngine:
    """Classifies, disambiguates and routes free-form sports questions.

    Flow:
    1. Resolve pronouns / clarification replies from session memory
    2. Cache lookup (resolved query + cohort) -- a hit ends the pipeline
    3. Entity extraction and time-frame detection
    4. Ambiguity check -- an ambiguous place returns a clarifying question
    5. Short match query rule ("Lakers vs Celtics")
    6. Pattern rules, then local fallbacks while confidence stays low
    7. Language-model classifier when still below the cohort threshold
    8. Routing, cache write, memory update

    Dependencies (all via constructor injection):
    - ClassificationCache and ConversationMemoryStore (hard)
    - LLMClassifier (soft: None keeps the engine fully local)
    """

    def __init__(
        self,
        *,
        cache: ClassificationCache,
        memory: ConversationMemoryStore,
        llm_classifier: LLMClassifier | None = None,
        extractor: EntityExtractor | None = None,
        pattern_classifier: PatternIntentClassifier | None = None,
        keyword_classifier: KeywordClassifier | None = None,
        ambiguity_detector: AmbiguityDetector | None = None,
        router: DataSourceRouter | None = None,
        experiment: ThresholdExperiment | None = None,
        sli: QuerySLI | None = None,
        context_threshold: float = DEFAULT_CONTEXT_THRESHOLD,
        fallback_order: tuple[str, ...] = LOCAL_FALLBACKS,
    ) -> None:
        unknown = [name for name in fallback_order if name not in LOCAL_FALLBACKS]
        if unknown:
            msg = f"Unknown local fallback(s): {', '.join(unknown)}"
            raise ValidationError(msg, field="fallback_order")
        self._cache = cache
        self._memory = memory
        self._llm = llm_classifier
        self._extractor = extractor or EntityExtractor()
        self._patterns = pattern_classifier or PatternIntentClassifier()
        self._keywords = keyword_classifier or KeywordClassifier()
        self._ambiguity = ambiguity_detector or AmbiguityDetector()
        self._router = router or DataSourceRouter()
        self._experiment = experiment or ThresholdExperiment()
        self._sli = sli
        self._context_threshold = context_threshold
        self._fallback_order = tuple(fallback_order)

    # -- Public API --

    async def understand(
        self,
        query: str,
        session_id: str | None = None,
        variant: str | None = None,
    ) -> QueryUnderstanding:
        """Understand one query. Never raises for classifier or storage failures."""
        if not query or not query.strip():
            msg = "Query must not be empty"
            raise ValidationError(msg, field="query")

        timer = self._sli.timer(self._sli.understand_duration) if self._sli else nullcontext()
        with timer:
            return await self._understand(query, session_id, variant)

    async def resolve_pronouns(self, session_id: str, query: str) -> PronounResolution:
        try:
            return await self._memory.resolve_pronouns(session_id, query)
        except Exception as exc:
            log_structured_error(logger, exc, session_id=session_id, stage="resolve_pronouns")
            return PronounResolution(resolved_query=query, used_memory=False)

    async def clear_memory(self, session_id: str) -> None:
        await self._memory.clear(session_id)

    async def clear_classification_cache(self) -> int:
        return await self._cache.clear()

    async def conversation_history(self, session_id: str) -> str:
        """Recent turns rendered for a downstream prompt ("" when none)."""
        return format_history(await self._memory.get(session_id))

    # -- Pipeline --

    async def _understand(
        self,
        query: str,
        session_id: str | None,
        variant: str | None,
    ) -> QueryUnderstanding:
        resolved, used_memory = query, False
        if session_id:
            resolution = await self.resolve_pronouns(session_id, query)
            resolved, used_memory = resolution.resolved_query, resolution.used_memory

        cohort = self._experiment.assign(session_id, variant)
        cohort_key = cohort.name if self._experiment.active else None

        cached = await self._cache.get(resolved, cohort_key)
        self._count_cache(cached is not None)
        if cached is not None:
            result = cached.with_request_flags(
                original_query=query,
                cache_hit=True,
                used_memory=used_memory,
            )
            await self._remember(session_id, query, result.entities)
            return result

        spans = self._extractor.locate(resolved)
        entities = merge_entities([s.entity for s in spans])
        time_frame = detect_time_frame(resolved)

        ambiguity = self._ambiguity.detect(resolved, entities)
        if ambiguity is not None:
            return await self._clarify(
                query,
                resolved,
                entities,
                time_frame,
                ambiguity,
                session_id,
                used_memory,
                cohort_key,
            )

        alternatives: list[QueryIntent] = []
        if short_match_teams(resolved, spans) is not None:
            draft = _Draft(
                QueryIntent.MATCH_PREDICTION,
                SHORT_QUERY_CONFIDENCE,
                "short_query",
                SHORT_QUERY_PATTERN,
            )
            time_frame = TimeFrame.UPCOMING
        else:
            match = self._patterns.classify(resolved)
            alternatives = list(match.alternatives)
            draft = _Draft(match.intent, match.confidence, "pattern", match.matched_pattern)
            if draft.is_weak(self._context_threshold):
                draft = self._local_fallbacks(resolved, entities, draft)
                inferred_match = draft.intent == QueryIntent.MATCH_PREDICTION
                if draft.pattern == CONTEXT_PATTERN and inferred_match:
                    time_frame = TimeFrame.UPCOMING

        classification = self._build_classification(resolved, entities, time_frame, draft)
        used_llm = False
        local_intent = draft.intent
        if self._llm is not None and draft.is_weak(cohort.llm_threshold):
            classification, draft = await self._classify_with_llm(
                self._llm,
                resolved,
                entities,
                draft,
                classification,
                session_id,
                cohort.name,
            )
            used_llm = True

        # Even the language model was unsure: answer, but suggest readings
        hint: str | None = None
        if used_llm and classification.confidence < LOW_CONFIDENCE_HINT:
            if local_intent != QueryIntent.UNCLEAR:
                alternatives = [local_intent, *alternatives]
            alternatives = list(
                dict.fromkeys(a for a in alternatives if a != classification.category)
            )
            hint = intent_clarifying_question(classification.category, alternatives)

        if self._sli:
            self._sli.resolution_stage.labels(stage=draft.stage).inc()

        routing = self._router.route(normalize_query(resolved), classification)
        understanding = QueryUnderstanding(
            classification=classification,
            routing=routing,
            original_query=query,
            resolved_query=resolved,
            time_frame=time_frame,
            alternative_intents=alternatives,
            clarifying_question=hint,
            pattern_matched=draft.pattern,
            used_llm=used_llm,
            used_memory=used_memory,
            cohort=cohort_key,
        )
        logger.info(
            "Query understood intent=%s confidence=%.2f stage=%s source=%s",
            classification.category.value,
            classification.confidence,
            draft.stage,
            routing.source.value,
        )

        await self._cache.put(resolved, understanding, cohort_key)
        await self._remember(session_id, query, classification.entities)
        return understanding

    def _local_fallbacks(
        self,
        text: str,
        entities: list[ExtractedEntity],
        draft: _Draft,
    ) -> _Draft:
        for name in self._fallback_order:
            if not draft.is_weak(self._context_threshold):
                break
            if name == "context":
                inferred = infer_intent_from_context(text, entities)
                if inferred is not None and INFERRED_CONFIDENCE > draft.confidence:
                    draft = _Draft(inferred, INFERRED_CONFIDENCE, "context", CONTEXT_PATTERN)
            elif name == "keyword":
                keyword = self._keywords.classify(text, entities)
                if keyword.confidence > draft.confidence or draft.intent == QueryIntent.UNCLEAR:
                    draft = _Draft(keyword.category, keyword.confidence, "keyword", KEYWORD_PATTERN)
        return draft

    async def _classify_with_llm(
        self,
        llm: LLMClassifier,
        text: str,
        entities: list[ExtractedEntity],
        draft: _Draft,
        local: ClassificationResult,
        session_id: str | None,
        cohort: str,
    ) -> tuple[ClassificationResult, _Draft]:
        timer = self._sli.timer(self._sli.llm_call_duration) if self._sli else nullcontext()
        with timer:
            outcome = await llm.classify(text, entities, session_id=session_id or "")

        if outcome.degraded:
            if self._sli:
                self._sli.llm_fallbacks.labels(cohort=cohort).inc()
            # Keep the better local answer, but a degraded result never claims > 0.5
            best = outcome.result
            if draft.intent != QueryIntent.UNCLEAR and local.confidence > best.confidence:
                best = local
            confidence = min(best.confidence, DEGRADED_MAX_CONFIDENCE)
            return (
                replace(best, confidence=confidence),
                _Draft(
                    best.category,
                    confidence,
                    "degraded",
                    draft.pattern if best is local else KEYWORD_PATTERN,
                ),
            )

        result = outcome.result
        if result.sport == Sport.UNKNOWN:
            result = replace(result, sport=detect_sport(text, result.entities))
        return result, _Draft(result.category, result.confidence, "llm")

    def _build_classification(
        self,
        text: str,
        entities: list[ExtractedEntity],
        time_frame: TimeFrame,
        draft: _Draft,
    ) -> ClassificationResult:
        return ClassificationResult(
            category=draft.intent,
            sport=detect_sport(text, entities),
            confidence=draft.confidence,
            entities=entities,
            needs_realtime=needs_realtime(draft.intent, time_frame),
            needs_api_data=needs_api_data(draft.intent),
            is_betting_related=is_betting_related(draft.intent, text),
            reasoning=f"{draft.stage}: {draft.pattern}" if draft.pattern else draft.stage,
        )

    async def _clarify(
        self,
        query: str,
        resolved: str,
        entities: list[ExtractedEntity],
        time_frame: TimeFrame,
        ambiguity: Ambiguity,
        session_id: str | None,
        used_memory: bool,
        cohort_key: str | None,
    ) -> QueryUnderstanding:
        if self._sli:
            self._sli.clarifications.inc()
            self._sli.resolution_stage.labels(stage="clarify").inc()

        classification = ClassificationResult(
            category=QueryIntent.UNCLEAR,
            sport=Sport.UNKNOWN,
            confidence=NO_MATCH_CONFIDENCE,
            entities=entities,
            reasoning=f"ambiguous place: {', '.join(ambiguity.place_names)}",
        )
        if session_id:
            await self._remember(session_id, query, entities)
            await self._remember(
                session_id,
                ambiguity.question,
                None,
                role="assistant",
                pending=ambiguity.place_names,
            )
        return QueryUnderstanding(
            classification=classification,
            routing=None,
            original_query=query,
            resolved_query=resolved,
            time_frame=time_frame,
            is_ambiguous=True,
            clarifying_question=ambiguity.question,
            clarification_candidates=list(ambiguity.options),
            used_memory=used_memory,
            cohort=cohort_key,
        )

    async def _remember(
        self,
        session_id: str | None,
        content: str,
        entities: list[ExtractedEntity] | None,
        *,
        role: str = "user",
        pending: list[str] | None = None,
    ) -> None:
        if not session_id:
            return
        try:
            await self._memory.add_turn(
                session_id, role, content, entities, pending_clarification=pending
            )
        except Exception as exc:
            log_structured_error(logger, exc, session_id=session_id, stage="memory_write")

    def _count_cache(self, hit: bool) -> None:
        if self._sli:
            self._sli.cache_lookups.labels(status="hit" if hit else "miss").inc()
