"""Time-frame detection (which period a question is about)."""

from __future__ import annotations

import re

from sportiq.shared.types import TimeFrame

# First match wins; no match means the current season.
_TIME_FRAME_PATTERNS: tuple[tuple[TimeFrame, re.Pattern[str]], ...] = (
    (TimeFrame.LIVE, re.compile(r"\b(live|right now|currently|at the moment|today|tonight)\b")),
    (TimeFrame.RECENT, re.compile(r"\b(last \d+|recent|recently|lately|this week|past (few|couple))\b")),
    (TimeFrame.SEASON, re.compile(r"\b(this season|season average|season stats|2025-26|current season)\b")),
    (TimeFrame.CAREER, re.compile(r"\b(career|all-?time|lifetime|ever)\b")),
    (TimeFrame.HISTORICAL, re.compile(r"\b(last (season|year)|(19|20)\d{2}|historical|back in)\b")),
    (TimeFrame.UPCOMING, re.compile(r"\b(next|upcoming|tomorrow|will|going to|prediction|who wins)\b")),
)


def detect_time_frame(text: str) -> TimeFrame:
    lowered = text.lower()
    for frame, pattern in _TIME_FRAME_PATTERNS:
        if pattern.search(lowered):
            return frame
    return TimeFrame.SEASON
