"""A/B experiment over the language-model confidence threshold.

Cohort assignment is sticky: the same session always lands in the same
cohort (sha256 of the session id). Requests without a session use the
first configured cohort. An explicit, known ``variant`` overrides both.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from sportiq.shared.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_COHORTS: Mapping[str, float] = MappingProxyType({"control": 0.6, "strict": 0.7})


@dataclass(frozen=True)
class Cohort:
    name: str
    llm_threshold: float


class ThresholdExperiment:
    """Maps sessions to cohorts, each with its own LLM threshold."""

    def __init__(self, cohorts: Mapping[str, float] = DEFAULT_COHORTS) -> None:
        if not cohorts:
            msg = "At least one threshold cohort is required"
            raise ValidationError(msg, field="cohorts")
        for name, threshold in cohorts.items():
            if not 0.0 <= threshold <= 1.0:
                msg = f"Threshold for cohort {name!r} must be within [0, 1]"
                raise ValidationError(msg, field="cohorts")
        self._cohorts = MappingProxyType(dict(cohorts))
        self._names = tuple(self._cohorts)

    @property
    def active(self) -> bool:
        """True when more than one cohort competes (cache keys carry the cohort)."""
        return len(self._names) > 1

    @property
    def cohorts(self) -> Mapping[str, float]:
        return self._cohorts

    def assign(self, session_id: str | None = None, variant: str | None = None) -> Cohort:
        if variant is not None and variant in self._cohorts:
            name = variant
        elif variant is not None:
            logger.warning("Unknown experiment variant=%s, using sticky assignment", variant)
            name = self._sticky(session_id)
        else:
            name = self._sticky(session_id)
        return Cohort(name=name, llm_threshold=self._cohorts[name])

    def _sticky(self, session_id: str | None) -> str:
        if not session_id:
            return self._names[0]
        digest = hashlib.sha256(session_id.encode("utf-8")).digest()
        return self._names[int.from_bytes(digest[:8], "big") % len(self._names)]
