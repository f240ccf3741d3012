"""Entity extraction: players, teams, leagues and matches from free text.

- Dictionary hits over accent-folded text (catalog aliases and full names)
- Unlisted names: runs of two or more capitalized words
- Matches: two teams (or names) joined by a separator -> "A vs B"

Output is ordered by position in the text and de-duplicated by folded name.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from sportiq.brain.entities.catalog import (
    ALIAS_INDEX,
    ALIAS_PATTERN,
    CatalogRecord,
    PlayerRecord,
    TeamRecord,
    mentioned_sports,
    pick_record,
)
from sportiq.shared.text import fold, normalize_name
from sportiq.shared.types import EntityType, ExtractedEntity, Sport, merge_entities

logger = logging.getLogger(__name__)

QUESTION_WORDS = frozenset(
    {
        "will", "can", "should", "does", "do", "did", "is", "are", "was", "what",
        "who", "whom", "how", "when", "where", "why", "which", "tell", "show", "give",
        "the", "i", "and", "or", "has", "have",
    }
)

MATCH_SEPARATORS = frozenset({"vs", "vs.", "v", "v.", "versus", "@", "at", "-", "–", "—"})

_WORD_RE = re.compile(r"[^\W\d_][\w'-]*")
_PLAYER_INDICATORS = re.compile(
    r"\b(player|striker|midfielder|defender|goalkeeper|forward|center|guard|quarterback|qb"
    r"|receiver|running back|rb|goalie|winger|stats|statistics|points|goals|assists"
    r"|rebounds|touchdowns|scored?|scoring|ppg|average|averaging)\b",
    re.IGNORECASE,
)
_VS_PHRASE = re.compile(
    r"([A-Z][\w'-]*(?:\s+[A-Z][\w'-]*)*)\s+(?:vs\.?|v\.?|versus|@)\s+([A-Z][\w'-]*(?:\s+[A-Z][\w'-]*)*)"
)
_MATCH_SIDES = (EntityType.TEAM, EntityType.UNKNOWN)

# Ordered: the first sport whose keywords appear wins.
_SPORT_HINTS: tuple[tuple[Sport, re.Pattern[str]], ...] = (
    (Sport.BASKETBALL, re.compile(r"\b(nba|basketball|lakers|celtics|warriors|lebron|curry|giannis|jokic|doncic)\b")),
    (Sport.AMERICAN_FOOTBALL, re.compile(r"\b(nfl|quarterback|touchdown|chiefs|eagles|super ?bowl|mahomes)\b")),
    (Sport.HOCKEY, re.compile(r"\b(nhl|hockey|stanley cup|maple leafs|bruins|oilers|mcdavid)\b")),
    (Sport.SOCCER, re.compile(r"\b(premier league|la liga|serie a|bundesliga|champions league|soccer|goal|striker|midfielder)\b")),
    (Sport.EUROLEAGUE, re.compile(r"\b(euroleague|eurobasket)\b")),
    (Sport.BASEBALL, re.compile(r"\b(mlb|baseball|yankees|dodgers|home run)\b")),
)
_GENERIC_FOOTBALL = re.compile(r"\bfootball\b")


@dataclass(frozen=True)
class EntitySpan:
    """An extracted entity and its [start, end) offsets in the query."""

    start: int
    end: int
    entity: ExtractedEntity

    def overlaps(self, start: int, end: int) -> bool:
        return start < self.end and self.start < end


def _entity_from_record(record: CatalogRecord, alias: str) -> ExtractedEntity:
    if isinstance(record, PlayerRecord):
        exact = alias == normalize_name(record.name)
        return ExtractedEntity(
            type=EntityType.PLAYER,
            name=record.name,
            confidence=0.95 if exact else 0.9,
            sport=record.sport.value,
            league=record.league,
        )
    if isinstance(record, TeamRecord):
        return ExtractedEntity(
            type=EntityType.TEAM,
            name=record.name,
            confidence=0.9,
            sport=record.sport.value,
            league=record.league,
        )
    return ExtractedEntity(
        type=EntityType.LEAGUE,
        name=record.name,
        confidence=0.9,
        sport=record.sport.value,
        league=record.name,
    )


class EntityExtractor:
    """Rule-based entity extractor backed by the immutable catalog."""

    def extract(self, text: str) -> list[ExtractedEntity]:
        """Extract entities in order of appearance. Never raises."""
        entities = merge_entities([s.entity for s in self.locate(text)])
        logger.debug("Extracted %d entities from %d chars", len(entities), len(text or ""))
        return entities

    def locate(self, text: str) -> list[EntitySpan]:
        """Entity mentions with their character offsets (duplicates kept)."""
        if not text or not text.strip():
            return []
        folded = fold(text)
        spans = self._dictionary_spans(folded)
        spans.extend(self._capitalized_spans(text, spans))
        spans.sort(key=lambda s: s.start)
        spans.extend(self._match_spans(text, folded, spans))
        spans.sort(key=lambda s: (s.start, s.entity.type == EntityType.MATCH))
        return spans

    def _dictionary_spans(self, folded: str) -> list[EntitySpan]:
        sports = mentioned_sports(folded)
        candidates: list[tuple[int, int, CatalogRecord, str]] = []
        for m in ALIAS_PATTERN.finditer(folded):
            alias = m.group(1)
            start = m.start(1)
            record = pick_record(ALIAS_INDEX[alias], sports)
            candidates.append((start, start + len(alias), record, alias))

        # Greedy: longest span first, then record priority, then leftmost
        candidates.sort(key=lambda c: (-(c[1] - c[0]), -c[2].priority, c[0]))
        chosen: list[EntitySpan] = []
        for start, end, record, alias in candidates:
            if any(s.overlaps(start, end) for s in chosen):
                continue
            chosen.append(EntitySpan(start, end, _entity_from_record(record, alias)))
        return chosen

    def _capitalized_spans(self, text: str, covered: list[EntitySpan]) -> list[EntitySpan]:
        runs: list[list[re.Match[str]]] = []
        current: list[re.Match[str]] = []
        previous_end = 0
        for m in _WORD_RE.finditer(text):
            word = m.group(0)
            capitalized = word[0].isupper() and not (len(word) > 1 and word.isupper())
            free = not any(s.overlaps(m.start(), m.end()) for s in covered)
            contiguous = not current or text[previous_end : m.start()].isspace()
            if capitalized and free and contiguous:
                current.append(m)
            else:
                if current:
                    runs.append(current)
                current = [m] if capitalized and free else []
            previous_end = m.end()
        if current:
            runs.append(current)

        has_indicator = bool(_PLAYER_INDICATORS.search(text))
        spans: list[EntitySpan] = []
        for run in runs:
            while run and run[0].group(0).lower() in QUESTION_WORDS:
                run = run[1:]
            if len(run) < 2:
                continue
            start, end = run[0].start(), run[-1].end()
            spans.append(
                EntitySpan(
                    start,
                    end,
                    ExtractedEntity(
                        type=EntityType.PLAYER if has_indicator else EntityType.UNKNOWN,
                        name=text[start:end],
                        confidence=0.8 if has_indicator else 0.5,
                    ),
                )
            )
        return spans

    def _match_spans(self, text: str, folded: str, spans: list[EntitySpan]) -> list[EntitySpan]:
        matches: list[EntitySpan] = []
        for left, right in zip(spans, spans[1:]):
            if left.entity.type not in _MATCH_SIDES or right.entity.type not in _MATCH_SIDES:
                continue
            gap = folded[left.end : right.start].strip()
            if gap in MATCH_SEPARATORS:
                matches.append(
                    EntitySpan(
                        left.start,
                        right.end,
                        ExtractedEntity(
                            type=EntityType.MATCH,
                            name=f"{left.entity.name} vs {right.entity.name}",
                            confidence=0.95,
                        ),
                    )
                )
        if matches:
            return matches

        phrase = _VS_PHRASE.search(text)
        if phrase is None:
            return []
        words = phrase.group(1).split()
        while words and words[0].lower() in QUESTION_WORDS:
            words = words[1:]
        if not words:
            return []
        home = " ".join(words)
        start = phrase.start(1) + phrase.group(1).index(words[0])
        return [
            EntitySpan(
                start,
                phrase.end(),
                ExtractedEntity(
                    type=EntityType.MATCH,
                    name=f"{home} vs {phrase.group(2).strip()}",
                    confidence=0.95,
                ),
            )
        ]


def detect_sport(text: str, entities: list[ExtractedEntity] | None = None) -> Sport:
    """Sport named by keywords, else the sport of the first entity that has one."""
    folded = fold(text)
    for sport, pattern in _SPORT_HINTS:
        if pattern.search(folded):
            return sport
    for entity in entities or ():
        if entity.sport:
            return Sport(entity.sport)
    if _GENERIC_FOOTBALL.search(folded):
        return Sport.AMERICAN_FOOTBALL
    return Sport.UNKNOWN
