"""Shared domain types used across layers.

These types flow through Port interfaces and the classification cache, so
each carries a JSON-safe ``to_dict`` / ``from_dict`` pair. Confidence values
are clamped into [0, 1] on construction; categories are always members of
the closed ``QueryIntent`` taxonomy.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from sportiq.shared.text import normalize_name


def clamp_confidence(value: Any, default: float = 0.5) -> float:
    """Coerce a value into a confidence in [0, 1]."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return max(0.0, min(1.0, number))


# -- Closed vocabularies --


class EntityType(str, Enum):
    """Kind of a named reference extracted from a query."""

    PLAYER = "PLAYER"
    TEAM = "TEAM"
    MATCH = "MATCH"
    LEAGUE = "LEAGUE"
    UNKNOWN = "UNKNOWN"


class QueryIntent(str, Enum):
    """Closed intent/category taxonomy."""

    PLAYER_STATS = "PLAYER_STATS"
    TEAM_STATS = "TEAM_STATS"
    MATCH_PREDICTION = "MATCH_PREDICTION"
    MATCH_RESULT = "MATCH_RESULT"
    STANDINGS = "STANDINGS"
    LINEUP = "LINEUP"
    INJURY_NEWS = "INJURY_NEWS"
    TRANSFER_NEWS = "TRANSFER_NEWS"
    HEAD_TO_HEAD = "HEAD_TO_HEAD"
    FORM_CHECK = "FORM_CHECK"
    BETTING_ANALYSIS = "BETTING_ANALYSIS"
    SCHEDULE = "SCHEDULE"
    GENERAL_INFO = "GENERAL_INFO"
    OUR_ANALYSIS = "OUR_ANALYSIS"
    UNCLEAR = "UNCLEAR"


class Sport(str, Enum):
    """Closed sport taxonomy."""

    BASKETBALL = "basketball"
    AMERICAN_FOOTBALL = "american_football"
    HOCKEY = "hockey"
    SOCCER = "soccer"
    EUROLEAGUE = "euroleague"
    BASEBALL = "baseball"
    UNKNOWN = "unknown"


class TimeFrame(str, Enum):
    """Temporal scope a question is about."""

    LIVE = "LIVE"
    RECENT = "RECENT"
    SEASON = "SEASON"
    CAREER = "CAREER"
    HISTORICAL = "HISTORICAL"
    UPCOMING = "UPCOMING"


class DataSource(str, Enum):
    """Class of backend the calling layer should consult."""

    NONE = "NONE"
    ARCHIVAL = "ARCHIVAL"
    REALTIME = "REALTIME"
    HYBRID = "HYBRID"


class Recency(str, Enum):
    """Freshness requirement for the answering data."""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


_CATEGORY_LABELS: dict[QueryIntent, str] = {
    QueryIntent.PLAYER_STATS: "Player Statistics",
    QueryIntent.TEAM_STATS: "Team Statistics",
    QueryIntent.MATCH_PREDICTION: "Match Prediction",
    QueryIntent.MATCH_RESULT: "Match Results",
    QueryIntent.STANDINGS: "Standings",
    QueryIntent.LINEUP: "Lineups",
    QueryIntent.INJURY_NEWS: "Injury Updates",
    QueryIntent.TRANSFER_NEWS: "Transfer News",
    QueryIntent.HEAD_TO_HEAD: "Head to Head",
    QueryIntent.FORM_CHECK: "Form Analysis",
    QueryIntent.BETTING_ANALYSIS: "Betting Analysis",
    QueryIntent.SCHEDULE: "Fixtures & Schedule",
    QueryIntent.GENERAL_INFO: "General",
    QueryIntent.OUR_ANALYSIS: "Our Prediction",
    QueryIntent.UNCLEAR: "Unclear",
}


def category_label(intent: QueryIntent) -> str:
    """Human-readable label for a category."""
    return _CATEGORY_LABELS.get(intent, intent.value)


# -- Entities --


@dataclass(frozen=True)
class ExtractedEntity:
    """A typed, named reference extracted from text."""

    type: EntityType
    name: str
    confidence: float = 0.5
    sport: str | None = None
    league: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))

    @property
    def key(self) -> str:
        """De-duplication key (case and accent insensitive)."""
        return normalize_name(self.name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "name": self.name,
            "confidence": self.confidence,
            "sport": self.sport,
            "league": self.league,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtractedEntity:
        return cls(
            type=EntityType(data["type"]),
            name=data["name"],
            confidence=data.get("confidence", 0.5),
            sport=data.get("sport"),
            league=data.get("league"),
        )


def merge_entities(
    primary: list[ExtractedEntity],
    *others: list[ExtractedEntity],
) -> list[ExtractedEntity]:
    """Concatenate entity lists keeping the first entity per normalized name."""
    seen: set[str] = set()
    merged: list[ExtractedEntity] = []
    for group in (primary, *others):
        for entity in group:
            key = entity.key
            if not key or key in seen:
                continue
            seen.add(key)
            merged.append(entity)
    return merged


# -- Classification --


@dataclass(frozen=True)
class ClassificationResult:
    """Best-effort classification of a single (resolved) query."""

    category: QueryIntent
    sport: Sport = Sport.UNKNOWN
    confidence: float = 0.5
    entities: list[ExtractedEntity] = field(default_factory=list)
    needs_realtime: bool = False
    needs_api_data: bool = False
    is_betting_related: bool = False
    reasoning: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "sport": self.sport.value,
            "confidence": self.confidence,
            "entities": [e.to_dict() for e in self.entities],
            "needs_realtime": self.needs_realtime,
            "needs_api_data": self.needs_api_data,
            "is_betting_related": self.is_betting_related,
            "reasoning": self.reasoning,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClassificationResult:
        return cls(
            category=QueryIntent(data["category"]),
            sport=Sport(data.get("sport", Sport.UNKNOWN.value)),
            confidence=data.get("confidence", 0.5),
            entities=[ExtractedEntity.from_dict(e) for e in data.get("entities", [])],
            needs_realtime=bool(data.get("needs_realtime", False)),
            needs_api_data=bool(data.get("needs_api_data", False)),
            is_betting_related=bool(data.get("is_betting_related", False)),
            reasoning=data.get("reasoning"),
        )


# -- Routing --


@dataclass(frozen=True)
class RoutingDecision:
    """Which class of backend should answer, and how fresh it must be."""

    source: DataSource
    recency: Recency
    confidence: float
    reason: str

    def __post_init__(self) -> None:
        if not self.reason or not self.reason.strip():
            msg = "RoutingDecision requires a non-empty reason"
            raise ValueError(msg)
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.value,
            "recency": self.recency.value,
            "confidence": self.confidence,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoutingDecision:
        return cls(
            source=DataSource(data["source"]),
            recency=Recency(data["recency"]),
            confidence=data["confidence"],
            reason=data["reason"],
        )


# -- Conversation memory --


@dataclass(frozen=True)
class ConversationMessage:
    """One remembered turn."""

    role: str  # "user" | "assistant"
    content: str
    timestamp: float
    entities: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp,
            "entities": self.entities,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConversationMessage:
        return cls(
            role=data["role"],
            content=data["content"],
            timestamp=float(data.get("timestamp", 0.0)),
            entities=dict(data.get("entities") or {}),
        )


@dataclass
class ConversationMemory:
    """Per-session recent turns plus one "last mentioned" slot per entity type."""

    messages: list[ConversationMessage] = field(default_factory=list)
    last_player: str | None = None
    last_team: str | None = None
    last_match: str | None = None
    last_sport: str | None = None
    last_updated: float = field(default_factory=time.time)
    pending_clarification: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "messages": [m.to_dict() for m in self.messages],
            "last_player": self.last_player,
            "last_team": self.last_team,
            "last_match": self.last_match,
            "last_sport": self.last_sport,
            "last_updated": self.last_updated,
            "pending_clarification": self.pending_clarification,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConversationMemory:
        return cls(
            messages=[ConversationMessage.from_dict(m) for m in data.get("messages", [])],
            last_player=data.get("last_player"),
            last_team=data.get("last_team"),
            last_match=data.get("last_match"),
            last_sport=data.get("last_sport"),
            last_updated=float(data.get("last_updated", 0.0)),
            pending_clarification=data.get("pending_clarification"),
        )


# -- Public result --


@dataclass(frozen=True)
class ClarificationOption:
    """One candidate reading of an ambiguous place name."""

    place: str
    team: str
    league: str
    sport: str

    def to_dict(self) -> dict[str, str]:
        return {"place": self.place, "team": self.team, "league": self.league, "sport": self.sport}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClarificationOption:
        return cls(
            place=data["place"], team=data["team"], league=data["league"], sport=data["sport"]
        )


@dataclass(frozen=True)
class QueryUnderstanding:
    """Everything the calling layer needs to answer (or clarify) a query."""

    classification: ClassificationResult
    routing: RoutingDecision | None
    original_query: str
    resolved_query: str
    time_frame: TimeFrame = TimeFrame.SEASON
    alternative_intents: list[QueryIntent] = field(default_factory=list)
    is_ambiguous: bool = False
    clarifying_question: str | None = None
    clarification_candidates: list[ClarificationOption] = field(default_factory=list)
    pattern_matched: str | None = None
    used_llm: bool = False
    used_memory: bool = False
    cache_hit: bool = False
    cohort: str | None = None

    @property
    def intent(self) -> QueryIntent:
        return self.classification.category

    @property
    def sport(self) -> Sport:
        return self.classification.sport

    @property
    def confidence(self) -> float:
        return self.classification.confidence

    @property
    def entities(self) -> list[ExtractedEntity]:
        return self.classification.entities

    @property
    def needs_realtime(self) -> bool:
        return self.classification.needs_realtime

    @property
    def needs_api_data(self) -> bool:
        return self.classification.needs_api_data

    @property
    def is_betting_related(self) -> bool:
        return self.classification.is_betting_related

    def with_request_flags(self, **changes: Any) -> QueryUnderstanding:
        """Copy with per-request fields (cache_hit, used_memory, ...) replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "classification": self.classification.to_dict(),
            "routing": self.routing.to_dict() if self.routing else None,
            "original_query": self.original_query,
            "resolved_query": self.resolved_query,
            "time_frame": self.time_frame.value,
            "alternative_intents": [i.value for i in self.alternative_intents],
            "is_ambiguous": self.is_ambiguous,
            "clarifying_question": self.clarifying_question,
            "clarification_candidates": [c.to_dict() for c in self.clarification_candidates],
            "pattern_matched": self.pattern_matched,
            "used_llm": self.used_llm,
            "used_memory": self.used_memory,
            "cache_hit": self.cache_hit,
            "cohort": self.cohort,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QueryUnderstanding:
        routing = data.get("routing")
        return cls(
            classification=ClassificationResult.from_dict(data["classification"]),
            routing=RoutingDecision.from_dict(routing) if routing else None,
            original_query=data["original_query"],
            resolved_query=data.get("resolved_query", data["original_query"]),
            time_frame=TimeFrame(data.get("time_frame", TimeFrame.SEASON.value)),
            alternative_intents=[QueryIntent(i) for i in data.get("alternative_intents", [])],
            is_ambiguous=bool(data.get("is_ambiguous", False)),
            clarifying_question=data.get("clarifying_question"),
            clarification_candidates=[
                ClarificationOption.from_dict(c) for c in data.get("clarification_candidates", [])
            ],
            pattern_matched=data.get("pattern_matched"),
            used_llm=bool(data.get("used_llm", False)),
            used_memory=bool(data.get("used_memory", False)),
            cache_hit=bool(data.get("cache_hit", False)),
            cohort=data.get("cohort"),
        )
