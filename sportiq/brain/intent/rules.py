"""Declarative intent rule table.

Each rule contributes at most one candidate (its first matching pattern).
Higher priority wins; rules of equal priority keep table order. Patterns
are compiled once at import. All patterns are case-insensitive except the
"Capitalized Name ... stats" pattern, which needs real capitals.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from sportiq.shared.types import QueryIntent


@dataclass(frozen=True)
class IntentRule:
    intent: QueryIntent
    patterns: tuple[re.Pattern[str], ...]
    priority: int


def _ci(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(
        QueryIntent.OUR_ANALYSIS,
        _ci(
            r"\b(your|sportbot('s)?|our)\s+(analysis|prediction|pick|call|take)\b",
            r"what (did|do) you (think|predict|say)",
            r"\bhow did (you|sportbot) (do|perform)\b",
        ),
        100,
    ),
    IntentRule(
        QueryIntent.MATCH_PREDICTION,
        _ci(
            r"who (will|is going to|gonna) win",
            r"\b(predict|prediction|preview)\b.*\b(match|game)\b",
            r"\b(match|game)\b.*\b(predict|prediction|preview)\b",
            r"\bwinner\s+(of|between)\b",
            r"\banalysis\s+(of|for)\s+.+\s+(vs?\.?|versus)\s+",
        ),
        90,
    ),
    IntentRule(
        QueryIntent.BETTING_ANALYSIS,
        _ci(
            r"\b(should i bet|betting|over.?under|spread|line|odds|value bet|edge)\b",
            r"\b(moneyline|money line|parlay|prop bet)\b",
            r"\b(points|goals|assists)\s+(over|under)\s+\d",
        ),
        85,
    ),
    IntentRule(
        QueryIntent.PLAYER_STATS,
        (
            *_ci(
                r"\bhow many (points|goals|assists|rebounds|touchdowns)",
                r"\b(stats|statistics|numbers|average|averaging)\b.*\b(player|for)\b",
            ),
            re.compile(r"\b[A-Z][a-z]+\s+[A-Z][a-z]+\b.*\b(stats|average|scoring|points|goals)\b"),
            *_ci(r"\b(ppg|rpg|apg|gpg)\b"),
        ),
        80,
    ),
    IntentRule(
        QueryIntent.TEAM_STATS,
        _ci(
            r"\b(team|club)\s+(stats|statistics|record)\b",
            r"\bhow (is|are)\s+.+\s+(doing|performing|playing)\b",
            r"\b(shots|xg|possession|clean sheets)\b.*\b(per game|average)\b",
            r"\b(form|streak|run)\b",
            r"\b(wins|losses|draws|record)\b",
        ),
        75,
    ),
    IntentRule(
        QueryIntent.SCHEDULE,
        _ci(
            r"\bwhen\b.*\b(play|playing|game|match|face|facing)\b",
            r"\bwhen (is|does|do|are|will)\b.*\b(play|game|match|next)\b",
            r"\bnext (game|match|fixture|opponent)\b",
            r"\b(schedule|fixture|calendar)\b",
            r"\bwho.*play.*next\b",
            r"\bwhat time\b.*\b(game|match|play)\b",
        ),
        75,
    ),
    IntentRule(
        QueryIntent.STANDINGS,
        _ci(
            r"\b(standings|table|ranking|position|place)\b",
            r"\bwho('s| is) (first|top|leading|winning)\b",
            r"\b(league|conference|division)\s+(leader|standings)\b",
        ),
        70,
    ),
    IntentRule(
        QueryIntent.MATCH_RESULT,
        _ci(
            r"\bwho won\b",
            r"\b(score|result|final)\b.*\b(game|match)\b",
            r"\b(game|match)\b.*\b(score|result)\b",
            r"\bhow did .+ (do|play|perform)\b.*\b(against|vs)\b",
        ),
        65,
    ),
    IntentRule(
        QueryIntent.LINEUP,
        _ci(
            r"\b(lineup|starting|xi|roster|who('s| is) playing)\b",
            r"\b(start|bench|substitute)\b",
        ),
        60,
    ),
    IntentRule(
        QueryIntent.INJURY_NEWS,
        _ci(
            r"\b(injur\w*|hurt|out|miss|sidelined?|available|fit|healthy)\b",
            r"\bwill .+ play\b",
            r"\b(doubt\w*|questionable|probable|ruled out)\b",
        ),
        55,
    ),
    IntentRule(
        QueryIntent.FORM_CHECK,
        _ci(
            r"\bhow('s| is| are) .+ (doing|going|looking)\b",
            r"\b(form|momentum|streak|run)\b",
            r"\blast \d+ (games|matches)\b",
        ),
        50,
    ),
    IntentRule(
        QueryIntent.HEAD_TO_HEAD,
        _ci(
            r"\bhead.to.head\b|\bh2h\b",
            r"\bhistory (between|of) .+ (and|vs)\b",
            r"\bhow (do|does) .+ (do|fare) against\b",
        ),
        45,
    ),
    IntentRule(
        QueryIntent.TRANSFER_NEWS,
        _ci(
            r"\b(transfer|sign|signing|rumou?r|linked|interest)\b",
            r"\b(buy|sell|move|join)\b",
        ),
        35,
    ),
    IntentRule(
        QueryIntent.GENERAL_INFO,
        _ci(
            r"\bwho is\b",
            r"\bwhat (is|are) (the )?(rules|offside|foul)\b",
            r"\btell me about\b",
        ),
        30,
    ),
)
