"""Keyword-only (degraded) classifier.

Used when the language-model classifier is unavailable, and as a local
fallback stage. Never more confident than 0.4.
"""

from __future__ import annotations

import re

from sportiq.brain.entities.extractor import detect_sport
from sportiq.brain.intent.signals import is_betting_related, needs_api_data, needs_realtime
from sportiq.brain.intent.timeframe import detect_time_frame
from sportiq.shared.types import ClassificationResult, ExtractedEntity, QueryIntent

KEYWORD_HIT_CONFIDENCE = 0.4
NO_KEYWORD_CONFIDENCE = 0.3
FALLBACK_REASONING = "Fallback classification (language model unavailable)"

# First match wins.
_KEYWORD_TABLE: tuple[tuple[QueryIntent, re.Pattern[str]], ...] = (
    (QueryIntent.PLAYER_STATS, re.compile(r"\b(stats?|statistics|average|ppg|points|goals|assists|rebounds)\b")),
    (QueryIntent.INJURY_NEWS, re.compile(r"\b(injur\w*|hurt|out|sidelined|questionable|doubtful)\b")),
    (QueryIntent.MATCH_PREDICTION, re.compile(r"\b(vs\.?|versus|against|match|analy[sz]e|analysis|preview)\b")),
    (QueryIntent.BETTING_ANALYSIS, re.compile(r"\b(over|under|prop|o/u|bet|wager|odds|should i|worth it|value)\b|(?<!\w)[+-]\d")),
    (QueryIntent.STANDINGS, re.compile(r"\b(standings?|table|rank\w*|position)\b")),
    (QueryIntent.SCHEDULE, re.compile(r"\b(when|schedule|fixtures?|next game|kick ?off)\b")),
    (QueryIntent.MATCH_RESULT, re.compile(r"\b(score|result|won|lost|beat)\b")),
)


class KeywordClassifier:
    """Deterministic keyword classification; never raises."""

    def classify(
        self,
        text: str,
        entities: list[ExtractedEntity] | None = None,
        *,
        reasoning: str = FALLBACK_REASONING,
    ) -> ClassificationResult:
        lowered = text.lower()
        category = QueryIntent.GENERAL_INFO
        confidence = NO_KEYWORD_CONFIDENCE
        for intent, pattern in _KEYWORD_TABLE:
            if pattern.search(lowered):
                category = intent
                confidence = KEYWORD_HIT_CONFIDENCE
                break

        entity_list = list(entities or [])
        return ClassificationResult(
            category=category,
            sport=detect_sport(text, entity_list),
            confidence=confidence,
            entities=entity_list,
            needs_realtime=needs_realtime(category, detect_time_frame(text)),
            needs_api_data=needs_api_data(category),
            is_betting_related=is_betting_related(category, text),
            reasoning=reasoning,
        )
