"""Per-session conversation memory and pronoun resolution.

- Stored under ``chat-memory:{session_id}`` with a 1 h TTL, at most 10 messages
- One "last mentioned" slot per entity type; each turn's first entity of a
  type overwrites that slot
- Follow-up questions ("how many points did he score?") are rewritten with
  the remembered names before classification
- A bare sport reply to a clarification ("nba") becomes a full question
- "so who wins?" after a match was discussed becomes a prediction question
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass

from sportiq.brain.entities.catalog import LEAGUE_WORDS, PLACE_INDEX
from sportiq.ports.storage_port import StoragePort
from sportiq.shared.text import normalize_name
from sportiq.shared.types import (
    ConversationMemory,
    ConversationMessage,
    EntityType,
    ExtractedEntity,
    Sport,
)

logger = logging.getLogger(__name__)

MEMORY_PREFIX = "chat-memory:"
DEFAULT_TTL_S = 3600
MAX_MESSAGES = 10
HISTORY_MESSAGES = 5
HISTORY_TRUNCATE = 200
FOLLOW_UP_MAX_TOKENS = 6

_MATCH_REF_RE = re.compile(
    r"\b(that game|the game|that match|the match|this match|this game)\b", re.IGNORECASE
)
_PLAYER_POSSESSIVE_RE = re.compile(r"\bhis\b", re.IGNORECASE)
_PLAYER_REF_RE = re.compile(r"\b(he|him|the player)\b", re.IGNORECASE)
_TEAM_POSSESSIVE_RE = re.compile(r"\btheir\b", re.IGNORECASE)
_TEAM_REF_RE = re.compile(r"\b(they|them|the team)\b", re.IGNORECASE)
_MATCH_IT_RE = re.compile(r"\b(about|for|in) it\b", re.IGNORECASE)

_FOLLOW_UP_PREDICTION_RE = re.compile(
    r"^\s*(?:(?:so|then|now|ok|okay)\b.*\b(?:who|what|will|win|prediction|think)\b"
    r"|who wins|your (?:prediction|pick)|prediction|what do you think)",
    re.IGNORECASE,
)
_NAMES_MATCH_RE = re.compile(r"\b(vs\.?|versus|v\.?)(?!\w)|@", re.IGNORECASE)

# Sport -> league label appended to rewritten prediction follow-ups
_SPORT_LEAGUES = {
    Sport.BASKETBALL.value: "NBA",
    Sport.AMERICAN_FOOTBALL.value: "NFL",
    Sport.HOCKEY.value: "NHL",
    Sport.BASEBALL.value: "MLB",
}

_ENTITY_BUCKETS = {
    EntityType.PLAYER: "players",
    EntityType.TEAM: "teams",
    EntityType.MATCH: "matches",
    EntityType.LEAGUE: "leagues",
}


@dataclass(frozen=True)
class PronounResolution:
    resolved_query: str
    used_memory: bool


def _memory_key(session_id: str) -> str:
    return f"{MEMORY_PREFIX}{session_id}"


def _possessive(name: str) -> str:
    return f"{name}'" if name.endswith("s") else f"{name}'s"


def substitute_references(query: str, memory: ConversationMemory) -> PronounResolution:
    """Replace match, player and team references with remembered names."""
    resolved = query
    used = False

    def sub(pattern: re.Pattern[str], replacement: str | None) -> None:
        nonlocal resolved, used
        if not replacement:
            return
        updated, count = pattern.subn(lambda _m: replacement, resolved)
        if count:
            resolved, used = updated, True

    # Match phrases first so "the game" is not split by later rules
    sub(_MATCH_REF_RE, memory.last_match)
    if memory.last_match:
        # "it" only after about/for/in; a bare "it" is too vague
        updated, count = _MATCH_IT_RE.subn(
            lambda m: f"{m.group(1)} {memory.last_match}", resolved
        )
        if count:
            resolved, used = updated, True
    if memory.last_player:
        sub(_PLAYER_POSSESSIVE_RE, _possessive(memory.last_player))
        sub(_PLAYER_REF_RE, memory.last_player)
    if memory.last_team:
        sub(_TEAM_POSSESSIVE_RE, _possessive(memory.last_team))
        sub(_TEAM_REF_RE, memory.last_team)
    return PronounResolution(resolved_query=resolved, used_memory=used)


def resolve_prediction_follow_up(query: str, memory: ConversationMemory) -> str | None:
    """Turn "so who wins?" after a match was discussed into a full prediction question."""
    if not memory.last_match or len(query.split()) > FOLLOW_UP_MAX_TOKENS:
        return None
    if _NAMES_MATCH_RE.search(query):
        return None
    if not _FOLLOW_UP_PREDICTION_RE.search(query):
        return None
    league = _SPORT_LEAGUES.get(memory.last_sport or "")
    resolved = f"Who will win {memory.last_match}"
    return f"{resolved} {league}" if league else resolved


def resolve_clarification_reply(query: str, places: list[str]) -> str | None:
    """Turn "nba" after "Dallas vs Chicago?" into "Who will win Mavericks vs Bulls NBA"."""
    word = normalize_name(query).strip(" ?!.")
    league_sport = LEAGUE_WORDS.get(word)
    if league_sport is None:
        return None
    league, _sport = league_sport
    nicknames: list[str] = []
    for place_name in places:
        place = PLACE_INDEX.get(normalize_name(place_name))
        if place is None:
            continue
        nicknames.extend(t.nickname for t in place.teams if t.league == league)
    if len(nicknames) >= 2:
        return f"Who will win {nicknames[0]} vs {nicknames[1]} {league}"
    if nicknames:
        return f"{nicknames[0]} {league}"
    return None


def format_history(memory: ConversationMemory | None) -> str:
    """Render recent turns and remembered entities for a downstream prompt."""
    if memory is None or not memory.messages:
        return ""
    lines = [
        "=== CONVERSATION HISTORY ===",
        "(Use this to understand context from previous messages)",
        "",
    ]
    for message in memory.messages[-HISTORY_MESSAGES:]:
        role = "User" if message.role == "user" else "Assistant"
        content = message.content
        if len(content) > HISTORY_TRUNCATE:
            content = content[:HISTORY_TRUNCATE] + "..."
        lines.extend([f"{role}: {content}", ""])
    if memory.last_player or memory.last_team or memory.last_match:
        lines.append("Recently discussed:")
        if memory.last_player:
            lines.append(f"- Player: {memory.last_player}")
        if memory.last_team:
            lines.append(f"- Team: {memory.last_team}")
        if memory.last_match:
            lines.append(f"- Match: {memory.last_match}")
        lines.append("")
    return "\n".join(lines) + "\n"


class ConversationMemoryStore:
    """Conversation memory persisted through StoragePort."""

    def __init__(
        self,
        storage: StoragePort,
        *,
        ttl_s: int = DEFAULT_TTL_S,
        max_messages: int = MAX_MESSAGES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._ttl_s = ttl_s
        self._max_messages = max_messages
        self._clock = clock

    async def get(self, session_id: str) -> ConversationMemory | None:
        raw = await self._storage.get(_memory_key(session_id))
        if raw is None:
            return None
        return ConversationMemory.from_dict(raw)

    async def add_turn(
        self,
        session_id: str,
        role: str,
        content: str,
        entities: list[ExtractedEntity] | None = None,
        *,
        pending_clarification: list[str] | None = None,
    ) -> ConversationMemory:
        """Append a message, update last-mentioned slots, and persist.

        ``pending_clarification`` replaces whatever was pending: passing
        None (the default) marks any earlier clarification as answered.
        """
        now = self._clock()
        memory = await self.get(session_id) or ConversationMemory(last_updated=now)

        buckets: dict[str, list[str]] = {}
        for entity in entities or ():
            bucket = _ENTITY_BUCKETS.get(entity.type)
            if bucket is not None:
                buckets.setdefault(bucket, []).append(entity.name)

        memory.messages.append(
            ConversationMessage(role=role, content=content, timestamp=now, entities=buckets)
        )
        if len(memory.messages) > self._max_messages:
            memory.messages = memory.messages[-self._max_messages :]

        if buckets.get("players"):
            memory.last_player = buckets["players"][0]
        if buckets.get("teams"):
            memory.last_team = buckets["teams"][0]
        if buckets.get("matches"):
            memory.last_match = buckets["matches"][0]
        sport = next((e.sport for e in entities or () if e.sport), None)
        if sport:
            memory.last_sport = sport
        memory.pending_clarification = pending_clarification
        memory.last_updated = now

        await self._storage.put(_memory_key(session_id), memory.to_dict(), ttl=self._ttl_s)
        return memory

    async def clear(self, session_id: str) -> None:
        await self._storage.delete(_memory_key(session_id))
        logger.info("Conversation memory cleared session=%s", session_id)

    async def resolve_pronouns(self, session_id: str, query: str) -> PronounResolution:
        memory = await self.get(session_id)
        if memory is None:
            return PronounResolution(resolved_query=query, used_memory=False)

        if memory.pending_clarification:
            rewritten = resolve_clarification_reply(query, memory.pending_clarification)
            if rewritten is not None:
                logger.debug("Clarification reply resolved session=%s", session_id)
                return PronounResolution(resolved_query=rewritten, used_memory=True)

        follow_up = resolve_prediction_follow_up(query, memory)
        if follow_up is not None:
            logger.debug("Prediction follow-up resolved session=%s", session_id)
            return PronounResolution(resolved_query=follow_up, used_memory=True)

        return substitute_references(query, memory)
