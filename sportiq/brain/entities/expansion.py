"""Player query expansion for downstream search.

"LeBron stats" -> "LeBron James stats Los Angeles Lakers NBA 2025-26 season"
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from sportiq.brain.entities.catalog import ALIAS_INDEX, ALIAS_PATTERN, PlayerRecord
from sportiq.shared.text import fold, normalize_name

logger = logging.getLogger(__name__)

CURRENT_SEASON = "2025-26"

_STATS_RE = re.compile(r"\b(stats|average|ppg|scoring|points|goals|assists)\b", re.IGNORECASE)


@dataclass(frozen=True)
class QueryExpansion:
    expanded_query: str
    player: PlayerRecord | None = None


def expand_query(query: str, *, season: str = CURRENT_SEASON) -> QueryExpansion:
    """Replace the first player short name with full name plus team context."""
    folded = fold(query)
    for m in ALIAS_PATTERN.finditer(folded):
        alias = m.group(1)
        player = next((r for r in ALIAS_INDEX[alias] if isinstance(r, PlayerRecord)), None)
        if player is None:
            continue
        full_name = normalize_name(player.name)
        if full_name in folded:
            continue

        start, end = m.start(1), m.start(1) + len(alias)
        expanded = f"{query[:start]}{player.name}{query[end:]}"
        if player.team.lower() not in folded and player.league.lower() not in folded:
            expanded = f"{expanded} {player.team} {player.league}"
        if _STATS_RE.search(query):
            expanded = f"{expanded} {season} season"
        expanded = expanded.strip()
        logger.debug("Expanded query player=%s", player.name)
        return QueryExpansion(expanded_query=expanded, player=player)
    return QueryExpansion(expanded_query=query)
