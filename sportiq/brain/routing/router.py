"""Data-source router: which class of backend should answer, and how fresh.

Resolution (first match wins):
1. Static knowledge (rules, definitions, greetings, hypotheticals) -> NONE
2. Real-time triggers -> REALTIME (hour for live, day for breaking news
   or the last game, week otherwise)
3. Archival / biography / all-time records -> ARCHIVAL/month, promoted to
   REALTIME/week when a current-season trigger is also present
4. Category default table
5. Generic fallback -> REALTIME/week, erring toward freshness

The router is pure: no I/O, no state.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from types import MappingProxyType

from sportiq.shared.types import (
    ClassificationResult,
    DataSource,
    QueryIntent,
    Recency,
    RoutingDecision,
)

logger = logging.getLogger(__name__)


def _any(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


STATIC_PATTERNS = _any(
    r"what (is|are) (an? |the )?(offside|foul|handball|rules?|icing|travel(l)?ing|penalty kick)\b",
    r"\brules of (football|soccer|basketball|hockey|baseball)\b",
    r"\bhow many players\b",
    r"\b(define|definition of|what does .+ mean)\b",
    r"\b(what if|hypothetically|imagine if|in theory)\b",
    r"^(hello|hi|hey|thanks|thank you|bye|ok)[\s!?.]*$",
    r"^(who are you|what can you do|help)[\s!?.]*$",
)

LIVE_TRIGGERS = _any(
    r"\b(live|right now|at the moment|currently|today|tonight|now)\b",
    r"\b(lineups?|starting (xi|five|lineup)|who('s| is) starting)\b",
)

BREAKING_TRIGGERS = _any(
    r"\b(breaking|latest|any news|what('s| is) (happening|new|going on))\b",
    r"\b(last (game|match|night)|yesterday|most recent|scored last|played last)\b",
)

WEEKLY_TRIGGERS = _any(
    r"\b(injur\w*|hurt|ruled out|questionable|doubtful|sidelined)\b",
    r"\b(standings|league table|table)\b",
)

ARCHIVAL_PATTERNS = _any(
    r"\b(all.?time|career|in history|history of|biography|bio|profile of)\b",
    r"\bwhere does .+ play\b",
    r"\b(which|what) (team|club) does .+ play\b",
    r"\bwhat position does .+ play\b",
    r"\b(when|where) was .+ born\b",
    r"\bhow (old|tall) is\b",
    r"\bwhat nationality is\b",
    r"\bwho won .*\b(19|20)\d{2}\b",
    r"\bmost .+ ever\b",
    r"\brecords?\b",
)

CURRENT_SEASON_TRIGGERS = _any(
    r"\b(this season|this year|so far|current season|currently|2025-26|season average)\b",
)

CATEGORY_DEFAULTS: Mapping[QueryIntent, tuple[DataSource, Recency, float]] = MappingProxyType(
    {
        QueryIntent.PLAYER_STATS: (DataSource.HYBRID, Recency.WEEK, 0.8),
        QueryIntent.TEAM_STATS: (DataSource.HYBRID, Recency.WEEK, 0.8),
        QueryIntent.MATCH_PREDICTION: (DataSource.HYBRID, Recency.DAY, 0.8),
        QueryIntent.MATCH_RESULT: (DataSource.REALTIME, Recency.DAY, 0.85),
        QueryIntent.STANDINGS: (DataSource.REALTIME, Recency.WEEK, 0.85),
        QueryIntent.LINEUP: (DataSource.REALTIME, Recency.HOUR, 0.85),
        QueryIntent.INJURY_NEWS: (DataSource.REALTIME, Recency.WEEK, 0.85),
        QueryIntent.TRANSFER_NEWS: (DataSource.REALTIME, Recency.WEEK, 0.8),
        QueryIntent.HEAD_TO_HEAD: (DataSource.ARCHIVAL, Recency.MONTH, 0.8),
        QueryIntent.FORM_CHECK: (DataSource.REALTIME, Recency.WEEK, 0.8),
        QueryIntent.BETTING_ANALYSIS: (DataSource.HYBRID, Recency.DAY, 0.75),
        QueryIntent.SCHEDULE: (DataSource.REALTIME, Recency.WEEK, 0.8),
        QueryIntent.GENERAL_INFO: (DataSource.ARCHIVAL, Recency.MONTH, 0.7),
        QueryIntent.OUR_ANALYSIS: (DataSource.ARCHIVAL, Recency.DAY, 0.9),
        QueryIntent.UNCLEAR: (DataSource.REALTIME, Recency.WEEK, 0.5),
    }
)

GENERIC_CONFIDENCE = 0.6


def _first_match(patterns: tuple[re.Pattern[str], ...], text: str) -> str | None:
    for pattern in patterns:
        m = pattern.search(text)
        if m:
            return m.group(0)
    return None


class DataSourceRouter:
    """Maps (normalized query, classification) to a RoutingDecision."""

    def __init__(
        self,
        category_defaults: Mapping[
            QueryIntent, tuple[DataSource, Recency, float]
        ] = CATEGORY_DEFAULTS,
    ) -> None:
        self._defaults = category_defaults

    def route(self, query: str, classification: ClassificationResult) -> RoutingDecision:
        decision = self._decide(query.strip(), classification)
        logger.debug(
            "Routed source=%s recency=%s reason=%s",
            decision.source.value,
            decision.recency.value,
            decision.reason,
        )
        return decision

    def _decide(self, text: str, classification: ClassificationResult) -> RoutingDecision:
        hit = _first_match(STATIC_PATTERNS, text)
        if hit:
            return RoutingDecision(
                DataSource.NONE, Recency.WEEK, 0.95, f"static knowledge question ({hit!r})"
            )

        hit = _first_match(LIVE_TRIGGERS, text)
        if hit:
            return RoutingDecision(
                DataSource.REALTIME, Recency.HOUR, 0.9, f"live data trigger ({hit!r})"
            )
        hit = _first_match(BREAKING_TRIGGERS, text)
        if hit:
            return RoutingDecision(
                DataSource.REALTIME, Recency.DAY, 0.9, f"recent news trigger ({hit!r})"
            )
        hit = _first_match(WEEKLY_TRIGGERS, text)
        if hit:
            return RoutingDecision(
                DataSource.REALTIME, Recency.WEEK, 0.85, f"real-time trigger ({hit!r})"
            )

        hit = _first_match(ARCHIVAL_PATTERNS, text)
        if hit:
            current = _first_match(CURRENT_SEASON_TRIGGERS, text)
            if current:
                return RoutingDecision(
                    DataSource.REALTIME,
                    Recency.WEEK,
                    0.8,
                    f"archival question scoped to current season ({current!r})",
                )
            return RoutingDecision(
                DataSource.ARCHIVAL, Recency.MONTH, 0.85, f"archival question ({hit!r})"
            )

        default = self._defaults.get(classification.category)
        if default is not None:
            source, recency, confidence = default
            return RoutingDecision(
                source,
                recency,
                confidence,
                f"category default for {classification.category.value}",
            )

        return RoutingDecision(
            DataSource.REALTIME,
            Recency.WEEK,
            GENERIC_CONFIDENCE,
            f"no routing rule for {classification.category.value}; preferring fresh data",
        )
