"""Data-need and betting signals derived from an intent."""

from __future__ import annotations

import re

from sportiq.shared.types import QueryIntent, TimeFrame

API_DATA_INTENTS = frozenset(
    {
        QueryIntent.PLAYER_STATS,
        QueryIntent.TEAM_STATS,
        QueryIntent.STANDINGS,
        QueryIntent.FORM_CHECK,
        QueryIntent.HEAD_TO_HEAD,
        QueryIntent.SCHEDULE,
        QueryIntent.LINEUP,
        QueryIntent.MATCH_RESULT,
    }
)

REALTIME_INTENTS = frozenset(
    {
        QueryIntent.INJURY_NEWS,
        QueryIntent.TRANSFER_NEWS,
        QueryIntent.MATCH_RESULT,
        QueryIntent.LINEUP,
    }
)

_BETTING_RE = re.compile(
    r"\b(bet|bets|betting|odds|over.?under|o/u|prop|props|wager|parlay|moneyline|spread|should i|worth it|value bet)\b",
    re.IGNORECASE,
)


def needs_api_data(intent: QueryIntent) -> bool:
    return intent in API_DATA_INTENTS


def needs_realtime(intent: QueryIntent, time_frame: TimeFrame) -> bool:
    return intent in REALTIME_INTENTS or time_frame == TimeFrame.LIVE


def is_betting_related(intent: QueryIntent, text: str) -> bool:
    return intent == QueryIntent.BETTING_ANALYSIS or bool(_BETTING_RE.search(text))
