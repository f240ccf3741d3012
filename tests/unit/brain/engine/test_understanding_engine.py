"""Tests for the query understanding pipeline.

Uses in-memory storage, a manual clock and FakeLLM; no network, no Redis.
"""

from __future__ import annotations

import pytest
from prometheus_client import CollectorRegistry

from sportiq.brain.cache.classification_cache import ClassificationCache
from sportiq.brain.engine.understanding import (
    CONTEXT_PATTERN,
    SHORT_QUERY_PATTERN,
    QueryUnderstandingEngine,
)
from sportiq.brain.intent.experiment import ThresholdExperiment
from sportiq.brain.intent.llm_classifier import LLMClassifier
from sportiq.brain.memory.conversation import ConversationMemoryStore
from sportiq.brain.metrics.sli import QuerySLI
from sportiq.infra.cache.memory import InMemoryStorageAdapter
from sportiq.shared.errors import ValidationError
from sportiq.shared.types import DataSource, EntityType, QueryIntent, Sport, TimeFrame
from tests.fakes import BrokenStorage, FakeLLM, ManualClock

_EXAMPLE_A_QUESTION = (
    "Which sport are you asking about? "
    "Dallas: Mavericks (NBA), Cowboys (NFL) or Stars (NHL). "
    "Chicago: Bulls (NBA), Bears (NFL) or Blackhawks (NHL)."
)


def _engine(
    cache: ClassificationCache,
    memory: ConversationMemoryStore,
    *,
    llm: FakeLLM | None = None,
    experiment: ThresholdExperiment | None = None,
    sli: QuerySLI | None = None,
    **kwargs,
) -> QueryUnderstandingEngine:
    return QueryUnderstandingEngine(
        cache=cache,
        memory=memory,
        llm_classifier=LLMClassifier(llm, model_id="test-model") if llm else None,
        experiment=experiment,
        sli=sli,
        **kwargs,
    )


@pytest.fixture
def engine(
    classification_cache: ClassificationCache,
    memory_store: ConversationMemoryStore,
    sli: QuerySLI,
) -> QueryUnderstandingEngine:
    return _engine(classification_cache, memory_store, sli=sli)


@pytest.mark.unit
class TestEndToEnd:
    async def test_ambiguous_places_ask_which_sport(
        self, engine: QueryUnderstandingEngine
    ) -> None:
        result = await engine.understand("Dallas vs Chicago tonight")

        assert result.is_ambiguous is True
        assert result.clarifying_question == _EXAMPLE_A_QUESTION
        assert result.intent == QueryIntent.UNCLEAR
        assert result.sport == Sport.UNKNOWN
        assert result.routing is None
        assert [c.team for c in result.clarification_candidates] == [
            "Mavericks", "Cowboys", "Stars", "Bulls", "Bears", "Blackhawks",
        ]

    async def test_player_stats_from_context(self, engine: QueryUnderstandingEngine) -> None:
        result = await engine.understand("Jokic points")

        assert result.intent == QueryIntent.PLAYER_STATS
        assert [(e.type, e.name, e.sport) for e in result.entities] == [
            (EntityType.PLAYER, "Nikola Jokić", "basketball"),
        ]
        assert result.needs_api_data is True
        assert result.needs_realtime is False
        assert result.sport == Sport.BASKETBALL
        assert result.pattern_matched == CONTEXT_PATTERN
        assert result.routing is not None
        assert result.used_llm is False

    async def test_short_match_query(self, engine: QueryUnderstandingEngine) -> None:
        result = await engine.understand("Lakers vs Celtics")

        assert result.intent == QueryIntent.MATCH_PREDICTION
        assert result.confidence >= 0.9
        assert result.time_frame == TimeFrame.UPCOMING
        assert result.pattern_matched == SHORT_QUERY_PATTERN
        teams = [e.name for e in result.entities if e.type == EntityType.TEAM]
        assert teams == ["Los Angeles Lakers", "Boston Celtics"]

    @pytest.mark.parametrize(
        "query",
        [
            "Lakers vs Celtics tonight",
            "Lakers vs Celtics prediction",
            "Arsenal Chelsea tomorrow",
            "Who wins Lakers vs Celtics",
        ],
    )
    async def test_short_match_with_extra_words(
        self, engine: QueryUnderstandingEngine, query: str
    ) -> None:
        result = await engine.understand(query)

        assert result.intent == QueryIntent.MATCH_PREDICTION
        assert result.confidence >= 0.9
        assert result.pattern_matched == SHORT_QUERY_PATTERN

    async def test_ambiguity_checked_before_short_match(
        self, engine: QueryUnderstandingEngine
    ) -> None:
        result = await engine.understand("Dallas Chicago tomorrow")
        assert result.is_ambiguous is True
        assert result.pattern_matched is None

    async def test_live_query_needs_realtime(self, engine: QueryUnderstandingEngine) -> None:
        result = await engine.understand("Lakers score tonight")
        assert result.time_frame == TimeFrame.LIVE
        assert result.needs_realtime is True
        assert result.routing is not None
        assert result.routing.source == DataSource.REALTIME

    async def test_original_and_resolved_query(self, engine: QueryUnderstandingEngine) -> None:
        result = await engine.understand("Jokic points")
        assert result.original_query == "Jokic points"
        assert result.resolved_query == "Jokic points"

    @pytest.mark.parametrize("query", ["", "   "])
    async def test_empty_query_rejected(
        self, engine: QueryUnderstandingEngine, query: str
    ) -> None:
        with pytest.raises(ValidationError):
            await engine.understand(query)


@pytest.mark.unit
class TestCaching:
    async def test_second_call_is_cache_hit(self, engine: QueryUnderstandingEngine) -> None:
        first = await engine.understand("Lakers vs Celtics")
        second = await engine.understand("  LAKERS   vs celtics ")

        assert first.cache_hit is False
        assert second.cache_hit is True
        assert second.original_query == "  LAKERS   vs celtics "
        assert second.classification == first.classification
        assert second.routing == first.routing

    async def test_entries_expire(
        self, engine: QueryUnderstandingEngine, clock: ManualClock
    ) -> None:
        await engine.understand("Lakers vs Celtics")
        clock.advance(301)
        assert (await engine.understand("Lakers vs Celtics")).cache_hit is False

    async def test_clarifications_are_not_cached(
        self, engine: QueryUnderstandingEngine
    ) -> None:
        await engine.understand("Dallas vs Chicago tonight")
        again = await engine.understand("Dallas vs Chicago tonight")
        assert again.cache_hit is False
        assert again.is_ambiguous is True

    async def test_cache_key_carries_cohort(
        self, engine: QueryUnderstandingEngine, storage: InMemoryStorageAdapter
    ) -> None:
        result = await engine.understand("Jokic points", variant="strict")
        assert result.cohort == "strict"
        assert await storage.list_keys("query-intel:*") == [
            "query-intel:jokic points|cohort=strict"
        ]

    async def test_single_cohort_has_no_suffix(
        self,
        classification_cache: ClassificationCache,
        memory_store: ConversationMemoryStore,
        storage: InMemoryStorageAdapter,
    ) -> None:
        engine = _engine(
            classification_cache, memory_store, experiment=ThresholdExperiment({"only": 0.6})
        )
        result = await engine.understand("Jokic points")
        assert result.cohort is None
        assert await storage.list_keys("query-intel:*") == ["query-intel:jokic points"]

    async def test_clear_classification_cache(self, engine: QueryUnderstandingEngine) -> None:
        await engine.understand("Jokic points")
        await engine.understand("Lakers vs Celtics")
        assert await engine.clear_classification_cache() == 2
        assert (await engine.understand("Jokic points")).cache_hit is False


@pytest.mark.unit
class TestConversation:
    async def test_pronoun_follow_up(self, engine: QueryUnderstandingEngine) -> None:
        await engine.understand("Jokic points", session_id="s1")
        result = await engine.understand("How many points did he score?", session_id="s1")

        assert result.resolved_query == "How many points did Nikola Jokić score?"
        assert result.original_query == "How many points did he score?"
        assert result.used_memory is True
        assert result.intent == QueryIntent.PLAYER_STATS

    async def test_prediction_follow_up(self, engine: QueryUnderstandingEngine) -> None:
        await engine.understand("Lakers vs Celtics", session_id="s1")
        result = await engine.understand("so who wins?", session_id="s1")

        assert result.resolved_query == "Who will win Los Angeles Lakers vs Boston Celtics NBA"
        assert result.original_query == "so who wins?"
        assert result.used_memory is True

    async def test_resolve_pronouns_only(self, engine: QueryUnderstandingEngine) -> None:
        await engine.understand("Lakers vs Celtics", session_id="s1")
        resolution = await engine.resolve_pronouns("s1", "did they win")
        assert resolution.used_memory is True
        assert resolution.resolved_query.startswith("did ")
        assert "they" not in resolution.resolved_query

    async def test_clarification_follow_up(self, engine: QueryUnderstandingEngine) -> None:
        first = await engine.understand("Dallas vs Chicago tonight", session_id="s1")
        assert first.is_ambiguous is True

        result = await engine.understand("nba", session_id="s1")
        assert result.is_ambiguous is False
        assert result.resolved_query == "Who will win Mavericks vs Bulls NBA"
        assert result.intent == QueryIntent.MATCH_PREDICTION
        assert result.used_memory is True

    async def test_history_and_clear(self, engine: QueryUnderstandingEngine) -> None:
        await engine.understand("Jokic points", session_id="s1")

        history = await engine.conversation_history("s1")
        assert "User: Jokic points" in history
        assert "- Player: Nikola Jokić" in history

        await engine.clear_memory("s1")
        assert await engine.conversation_history("s1") == ""

    async def test_storage_failure_degrades(self) -> None:
        broken = BrokenStorage()
        engine = QueryUnderstandingEngine(
            cache=ClassificationCache(broken),
            memory=ConversationMemoryStore(broken),
        )
        result = await engine.understand("Lakers vs Celtics", session_id="s1")

        assert result.intent == QueryIntent.MATCH_PREDICTION
        assert result.used_memory is False
        assert result.cache_hit is False


@pytest.mark.unit
class TestLocalFallbacks:
    async def test_no_fallbacks_leaves_query_unclear(
        self, classification_cache: ClassificationCache, memory_store: ConversationMemoryStore
    ) -> None:
        engine = _engine(classification_cache, memory_store, fallback_order=())
        result = await engine.understand("Jokic points")
        assert result.intent == QueryIntent.UNCLEAR
        assert result.routing is not None

    async def test_keyword_only(
        self, classification_cache: ClassificationCache, memory_store: ConversationMemoryStore
    ) -> None:
        engine = _engine(classification_cache, memory_store, fallback_order=("keyword",))
        result = await engine.understand("Jokic points")
        assert result.intent == QueryIntent.PLAYER_STATS
        assert result.confidence == 0.4

    def test_unknown_fallback_rejected(
        self, classification_cache: ClassificationCache, memory_store: ConversationMemoryStore
    ) -> None:
        with pytest.raises(ValidationError):
            _engine(classification_cache, memory_store, fallback_order=("context", "magic"))


_LLM_REPLY = {
    "category": "PLAYER_STATS",
    "sport": "unknown",
    "confidence": 0.92,
    "entities": [{"type": "PLAYER", "name": "Nikola Jokic"}],
    "needs_realtime": False,
    "needs_api_data": True,
    "is_betting_related": False,
    "reasoning": "stat line request",
}


@pytest.mark.unit
class TestLanguageModelStage:
    @pytest.fixture
    def strict(self) -> ThresholdExperiment:
        """One cohort whose threshold sits above context inference (0.75)."""
        return ThresholdExperiment({"strict": 0.9})

    async def test_confident_local_answer_skips_llm(
        self, classification_cache: ClassificationCache, memory_store: ConversationMemoryStore
    ) -> None:
        llm = FakeLLM(_LLM_REPLY)
        engine = _engine(classification_cache, memory_store, llm=llm)
        result = await engine.understand("Lakers vs Celtics")
        assert llm.calls == []
        assert result.used_llm is False

    async def test_llm_answer_used(
        self,
        classification_cache: ClassificationCache,
        memory_store: ConversationMemoryStore,
        strict: ThresholdExperiment,
        sli: QuerySLI,
        registry: CollectorRegistry,
    ) -> None:
        llm = FakeLLM(_LLM_REPLY)
        engine = _engine(classification_cache, memory_store, llm=llm, experiment=strict, sli=sli)
        result = await engine.understand("Jokic points")

        assert len(llm.calls) == 1
        assert result.used_llm is True
        assert result.confidence == 0.92
        assert result.sport == Sport.BASKETBALL
        assert [e.name for e in result.entities] == ["Nikola Jokić"]
        assert result.classification.reasoning == "stat line request"
        assert registry.get_sample_value(
            "sportiq_resolution_stage_total", {"stage": "llm"}
        ) == 1.0
        assert registry.get_sample_value("sportiq_llm_call_duration_seconds_count") == 1.0

    async def test_llm_failure_keeps_best_local_answer_capped(
        self,
        classification_cache: ClassificationCache,
        memory_store: ConversationMemoryStore,
        strict: ThresholdExperiment,
        sli: QuerySLI,
        registry: CollectorRegistry,
    ) -> None:
        llm = FakeLLM(error=ConnectionError("provider down"))
        engine = _engine(classification_cache, memory_store, llm=llm, experiment=strict, sli=sli)
        result = await engine.understand("Jokic points")

        assert result.used_llm is True
        assert result.intent == QueryIntent.PLAYER_STATS
        assert result.confidence == 0.5
        assert result.routing is not None
        assert registry.get_sample_value(
            "sportiq_llm_fallback_total", {"cohort": "strict"}
        ) == 1.0

    async def test_unsure_llm_answer_suggests_readings(
        self, classification_cache: ClassificationCache, memory_store: ConversationMemoryStore
    ) -> None:
        reply = {**_LLM_REPLY, "category": "FORM_CHECK", "confidence": 0.45, "entities": []}
        engine = _engine(
            classification_cache,
            memory_store,
            llm=FakeLLM(reply),
            experiment=ThresholdExperiment({"strict": 0.9}),
        )
        result = await engine.understand("is Jokic healthy or in form")

        assert result.intent == QueryIntent.FORM_CHECK
        assert result.clarifying_question == (
            "Are you asking about recent form, team performance "
            "or injury/availability status?"
        )
        assert result.alternative_intents == [QueryIntent.TEAM_STATS, QueryIntent.INJURY_NEWS]
        # A hint, not a place clarification: still routed and cached
        assert result.is_ambiguous is False
        assert result.routing is not None
        again = await engine.understand("is Jokic healthy or in form")
        assert again.cache_hit is True
        assert again.clarifying_question == result.clarifying_question

    async def test_confident_llm_answer_has_no_hint(
        self,
        classification_cache: ClassificationCache,
        memory_store: ConversationMemoryStore,
        strict: ThresholdExperiment,
    ) -> None:
        engine = _engine(
            classification_cache, memory_store, llm=FakeLLM(_LLM_REPLY), experiment=strict
        )
        result = await engine.understand("Jokic points")
        assert result.used_llm is True
        assert result.clarifying_question is None

    async def test_llm_failure_on_unclear_query(
        self, classification_cache: ClassificationCache, memory_store: ConversationMemoryStore
    ) -> None:
        engine = _engine(
            classification_cache, memory_store, llm=FakeLLM(error=TimeoutError("slow"))
        )
        result = await engine.understand("xyzzy plugh")

        assert result.used_llm is True
        assert result.confidence <= 0.5
        assert result.intent == QueryIntent.GENERAL_INFO


@pytest.mark.unit
class TestMetrics:
    async def test_cache_and_latency_counters(
        self, engine: QueryUnderstandingEngine, registry: CollectorRegistry
    ) -> None:
        await engine.understand("Lakers vs Celtics")
        await engine.understand("Lakers vs Celtics")

        hits = {"status": "hit"}
        misses = {"status": "miss"}
        assert registry.get_sample_value("sportiq_classification_cache_total", hits) == 1.0
        assert registry.get_sample_value("sportiq_classification_cache_total", misses) == 1.0
        assert registry.get_sample_value("sportiq_understand_duration_seconds_count") == 2.0
        assert registry.get_sample_value(
            "sportiq_resolution_stage_total", {"stage": "short_query"}
        ) == 1.0

    async def test_clarification_counter(
        self, engine: QueryUnderstandingEngine, registry: CollectorRegistry
    ) -> None:
        await engine.understand("Dallas vs Chicago tonight")
        assert registry.get_sample_value("sportiq_clarification_total") == 1.0
