"""Context inference for queries the rule table could not place.

- Two teams -> match prediction (or result, with a past-tense verb)
- One team + scheduling word -> schedule; a lone team -> form check
- Players without teams -> player stats

Also hosts the short-query rule ("Roma Sassuolo", "Lakers vs Celtics tonight").
"""

from __future__ import annotations

import re

from sportiq.brain.entities.extractor import EntitySpan
from sportiq.shared.text import fold
from sportiq.shared.types import EntityType, ExtractedEntity, QueryIntent

INFERRED_CONFIDENCE = 0.75
SHORT_QUERY_CONFIDENCE = 0.95
SHORT_QUERY_MAX_TOKENS = 6

SHORT_QUERY_SEPARATORS = frozenset(
    {"vs", "vs.", "v", "v.", "versus", "at", "@", "-", "–", "—", "and", "or", "&"}
)

_PAST_TENSE_RE = re.compile(r"\b(won|beat|defeated|lost|drew|played)\b", re.IGNORECASE)
_SCHEDULING_RE = re.compile(r"\b(next|when|schedule|play)\b", re.IGNORECASE)
_RESIDUE_STRIP = "?!.,;:"


def infer_intent_from_context(
    text: str, entities: list[ExtractedEntity]
) -> QueryIntent | None:
    """Guess an intent from entity composition alone; None when nothing fits."""
    teams = sum(1 for e in entities if e.type == EntityType.TEAM)
    players = sum(1 for e in entities if e.type == EntityType.PLAYER)

    if teams >= 2:
        if _PAST_TENSE_RE.search(text):
            return QueryIntent.MATCH_RESULT
        return QueryIntent.MATCH_PREDICTION

    if teams == 1:
        if _SCHEDULING_RE.search(text):
            return QueryIntent.SCHEDULE
        if len(entities) == 1:
            return QueryIntent.FORM_CHECK
        return None

    if players >= 1:
        return QueryIntent.PLAYER_STATS
    return None


def short_match_teams(text: str, spans: list[EntitySpan]) -> tuple[str, str] | None:
    """Return the two teams of a short match query, or None.

    Qualifies when the query has at most six tokens and exactly two team
    mentions that sit next to each other, joined by one separator or by
    nothing ("Lakers vs Celtics tonight", "who wins Arsenal Chelsea").
    """
    if len(text.split()) > SHORT_QUERY_MAX_TOKENS:
        return None
    team_spans = [s for s in spans if s.entity.type == EntityType.TEAM]
    if len(team_spans) != 2:
        return None

    first, second = sorted(team_spans, key=lambda s: s.start)
    between = [tok.strip(_RESIDUE_STRIP) for tok in fold(text)[first.end : second.start].split()]
    between = [tok for tok in between if tok]
    if len(between) > 1 or (between and between[0] not in SHORT_QUERY_SEPARATORS):
        return None
    return first.entity.name, second.entity.name
