"""Ambiguity detection for places hosting teams in several leagues.

"Dallas vs Chicago tonight" could be NBA, NFL or NHL. Rather than guess,
the engine asks which sport is meant, listing every candidate team.
A low-confidence answer instead carries a softer hint naming the
readings it wavered between; that one does not stop routing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sportiq.brain.entities.catalog import (
    PLACE_INDEX,
    PLACE_PATTERN,
    AmbiguousPlace,
    PlaceTeam,
    mentioned_sports,
)
from sportiq.shared.text import fold
from sportiq.shared.types import ClarificationOption, EntityType, ExtractedEntity, QueryIntent

logger = logging.getLogger(__name__)

CLARIFICATION_PREFIX = "Which sport are you asking about?"

_DISAMBIGUATING_TYPES = frozenset({EntityType.TEAM, EntityType.PLAYER, EntityType.LEAGUE})


@dataclass(frozen=True)
class Ambiguity:
    places: tuple[AmbiguousPlace, ...]
    question: str
    options: tuple[ClarificationOption, ...]

    @property
    def place_names(self) -> list[str]:
        return [p.name for p in self.places]


def _format_teams(teams: tuple[PlaceTeam, ...]) -> str:
    labels = [f"{t.nickname} ({t.league})" for t in teams]
    if len(labels) == 1:
        return labels[0]
    return f"{', '.join(labels[:-1])} or {labels[-1]}"


def clarifying_question(places: tuple[AmbiguousPlace, ...]) -> str:
    parts = [f"{place.name}: {_format_teams(place.teams)}." for place in places]
    return " ".join([CLARIFICATION_PREFIX, *parts])


class AmbiguityDetector:
    """Flags queries naming a multi-league place with nothing to disambiguate it."""

    def detect(self, text: str, entities: list[ExtractedEntity]) -> Ambiguity | None:
        folded = fold(text)
        places: list[AmbiguousPlace] = []
        for m in PLACE_PATTERN.finditer(folded):
            place = PLACE_INDEX[m.group(1)]
            if place not in places:
                places.append(place)
        if not places:
            return None

        if mentioned_sports(folded):
            return None
        # A known team, player or league already pins the sport
        if any(e.type in _DISAMBIGUATING_TYPES and e.sport for e in entities):
            return None

        found = tuple(places)
        options = tuple(
            ClarificationOption(
                place=place.name, team=team.nickname, league=team.league, sport=team.sport.value
            )
            for place in found
            for team in place.teams
        )
        logger.info("Ambiguous place mention places=%s", [p.name for p in found])
        return Ambiguity(places=found, question=clarifying_question(found), options=options)


# -- Intent-level hints for low-confidence answers (non-terminal) --

LOW_CONFIDENCE_HINT = 0.6
GENERIC_CLARIFICATION = "Could you be more specific about what you'd like to know?"

_INTENT_PHRASES = {
    QueryIntent.PLAYER_STATS: "their statistics",
    QueryIntent.TEAM_STATS: "team performance",
    QueryIntent.MATCH_PREDICTION: "who will win",
    QueryIntent.INJURY_NEWS: "injury/availability status",
    QueryIntent.FORM_CHECK: "recent form",
}


def intent_clarifying_question(
    intent: QueryIntent, alternatives: list[QueryIntent] | tuple[QueryIntent, ...]
) -> str:
    """Offer the winning intent and its runners-up as readings to choose from."""
    phrases: list[str] = []
    for candidate in (intent, *alternatives):
        phrase = _INTENT_PHRASES.get(candidate)
        if phrase and phrase not in phrases:
            phrases.append(phrase)
    phrases = phrases[:3]
    if len(phrases) < 2:
        return GENERIC_CLARIFICATION
    return f"Are you asking about {', '.join(phrases[:-1])} or {phrases[-1]}?"
