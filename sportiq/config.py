"""Engine settings read from environment variables.

- Parsed once by the composition root (sportiq.main)
- Invalid values fail fast with ValidationError
- LLM_API_KEY is mandatory only while the LLM classifier is enabled
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from sportiq.brain.intent.experiment import DEFAULT_COHORTS
from sportiq.shared.errors import ConfigurationMissingError, ValidationError

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    msg = f"{name} must be a boolean, got {raw!r}"
    raise ValidationError(msg, field=name)


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        msg = f"{name} must be a number, got {raw!r}"
        raise ValidationError(msg, field=name) from None


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        msg = f"{name} must be an integer, got {raw!r}"
        raise ValidationError(msg, field=name) from None
    if value <= 0:
        msg = f"{name} must be positive, got {value}"
        raise ValidationError(msg, field=name)
    return value


def _env_list(env: Mapping[str, str], name: str, default: str) -> tuple[str, ...]:
    raw = env.get(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def parse_cohorts(raw: str) -> dict[str, float]:
    """Parse ``"control=0.6,strict=0.7"`` into a cohort -> threshold map."""
    cohorts: dict[str, float] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            msg = f"Cohort entry must look like name=threshold, got {item!r}"
            raise ValidationError(msg, field="SPORTIQ_LLM_THRESHOLDS")
        try:
            threshold = float(value)
        except ValueError:
            msg = f"Threshold for cohort {name.strip()!r} must be a number"
            raise ValidationError(msg, field="SPORTIQ_LLM_THRESHOLDS") from None
        cohorts[name.strip()] = threshold
    return cohorts


@dataclass(frozen=True)
class EngineSettings:
    """Runtime configuration for the engine and its adapters."""

    redis_url: str = ""
    llm_enabled: bool = True
    llm_api_key: str = ""
    llm_model: str = "gpt-4o-mini"
    llm_base_url: str | None = None
    llm_timeout_s: float = 8.0
    context_threshold: float = 0.6
    llm_thresholds: Mapping[str, float] = field(default_factory=lambda: DEFAULT_COHORTS)
    classification_ttl_s: int = 300
    memory_ttl_s: int = 3600
    cache_max_entries: int = 500
    fallback_order: tuple[str, ...] = ("context", "keyword")
    cors_origins: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not 0.0 <= self.context_threshold <= 1.0:
            msg = "SPORTIQ_CONTEXT_THRESHOLD must be within [0, 1]"
            raise ValidationError(msg, field="SPORTIQ_CONTEXT_THRESHOLD")
        if self.llm_timeout_s <= 0:
            msg = "LLM_TIMEOUT_S must be positive"
            raise ValidationError(msg, field="LLM_TIMEOUT_S")
        object.__setattr__(self, "llm_thresholds", MappingProxyType(dict(self.llm_thresholds)))

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> EngineSettings:
        env = os.environ if env is None else env
        return cls(
            redis_url=env.get("REDIS_URL", "").strip(),
            llm_enabled=_env_bool(env, "LLM_CLASSIFIER_ENABLED", True),
            llm_api_key=env.get("LLM_API_KEY", ""),
            llm_model=env.get("LLM_MODEL", "") or "gpt-4o-mini",
            llm_base_url=env.get("LLM_BASE_URL", "") or None,
            llm_timeout_s=_env_float(env, "LLM_TIMEOUT_S", 8.0),
            context_threshold=_env_float(env, "SPORTIQ_CONTEXT_THRESHOLD", 0.6),
            llm_thresholds=parse_cohorts(
                env.get("SPORTIQ_LLM_THRESHOLDS", "") or "control=0.6,strict=0.7"
            ),
            classification_ttl_s=_env_int(env, "SPORTIQ_CLASSIFICATION_TTL_S", 300),
            memory_ttl_s=_env_int(env, "SPORTIQ_MEMORY_TTL_S", 3600),
            cache_max_entries=_env_int(env, "SPORTIQ_CACHE_MAX_ENTRIES", 500),
            fallback_order=_env_list(env, "SPORTIQ_FALLBACK_ORDER", "context,keyword"),
            cors_origins=_env_list(env, "CORS_ORIGINS", ""),
        )

    def require_llm_credentials(self) -> None:
        """Raise when the LLM classifier is enabled without an API key."""
        if self.llm_enabled and not self.llm_api_key:
            raise ConfigurationMissingError(
                "LLM_API_KEY",
                "LLM_API_KEY is required while LLM_CLASSIFIER_ENABLED is true",
            )
