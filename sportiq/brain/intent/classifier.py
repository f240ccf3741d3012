"""Pattern intent classifier.

- Every rule with a matching pattern contributes one candidate
- Winner = highest priority; confidence from the gap to the runner-up
- Deterministic and side-effect free

The matched pattern is reported for tracking which rules fire in practice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sportiq.brain.intent.rules import INTENT_RULES, IntentRule
from sportiq.shared.types import QueryIntent

logger = logging.getLogger(__name__)

NO_MATCH_CONFIDENCE = 0.3
SINGLE_MATCH_CONFIDENCE = 0.85


@dataclass(frozen=True)
class PatternMatch:
    """Result of pattern classification."""

    intent: QueryIntent
    confidence: float
    alternatives: tuple[QueryIntent, ...] = field(default_factory=tuple)
    matched_pattern: str | None = None


def gap_confidence(gap: int) -> float:
    """Confidence of the winning rule given its priority lead over the runner-up."""
    if gap > 20:
        return 0.9
    if gap > 10:
        return 0.75
    return 0.6


class PatternIntentClassifier:
    """Rule-table classifier; the table is injectable for tests."""

    def __init__(self, rules: tuple[IntentRule, ...] = INTENT_RULES) -> None:
        self._rules = rules

    def classify(self, text: str) -> PatternMatch:
        candidates: list[tuple[IntentRule, str]] = []
        for rule in self._rules:
            for pattern in rule.patterns:
                if pattern.search(text):
                    candidates.append((rule, pattern.pattern))
                    break

        if not candidates:
            return PatternMatch(intent=QueryIntent.UNCLEAR, confidence=NO_MATCH_CONFIDENCE)

        # sorted() is stable: equal priorities keep table order
        candidates = sorted(candidates, key=lambda c: -c[0].priority)
        top, matched = candidates[0]
        if len(candidates) == 1:
            confidence = SINGLE_MATCH_CONFIDENCE
        else:
            confidence = gap_confidence(top.priority - candidates[1][0].priority)

        result = PatternMatch(
            intent=top.intent,
            confidence=confidence,
            alternatives=tuple(rule.intent for rule, _ in candidates[1:3]),
            matched_pattern=matched,
        )
        logger.debug(
            "Pattern classification intent=%s confidence=%.2f candidates=%d",
            result.intent.value,
            result.confidence,
            len(candidates),
        )
        return result
