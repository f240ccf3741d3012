"""Text normalization shared by extraction, caching and memory.

fold() maps every input character to exactly one output character, so
offsets found in the folded text are valid offsets into the original.
"""

from __future__ import annotations

import re
import unicodedata

_WS_RE = re.compile(r"\s+")
_TOKEN_RE = re.compile(r"[\w'@&.-]+", re.UNICODE)


def _fold_char(ch: str) -> str:
    decomposed = unicodedata.normalize("NFKD", ch)
    base = decomposed[0] if decomposed else ch
    lowered = base.lower()
    return lowered[0] if lowered else base


def fold(text: str) -> str:
    """Lower-case and strip diacritics, preserving string length."""
    return "".join(_fold_char(ch) for ch in text)


def normalize_query(text: str) -> str:
    """Case-insensitive, trimmed, whitespace-collapsed form of a query."""
    return _WS_RE.sub(" ", text.strip()).lower()


def normalize_name(name: str) -> str:
    """Key used to de-duplicate entity names (case and accent insensitive)."""
    return _WS_RE.sub(" ", fold(name).strip())


def tokenize(text: str) -> list[str]:
    """Split a query into word-ish tokens (separators like '-' and '@' kept)."""
    return _TOKEN_RE.findall(text)
