"""Structured error logging for recovered failures.

Failures the engine recovers from (LLM transport errors, malformed
classifier output) are never raised to the caller, so they must at least
leave a structured trail:
- error_code, stack_trace, context
- session and query identifiers for correlation
- LLM keys are redacted; endpoint URLs and messages lose embedded credentials
"""

from __future__ import annotations

import logging
import re
import traceback
from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class StructuredError:
    """Structured representation of an error for logging."""

    error_code: str
    message: str
    stack_trace: str
    context: dict[str, Any] = field(default_factory=dict)
    session_id: str = ""
    stage: str = ""
    recovered: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict suitable for JSON logging."""
        d = asdict(self)
        d["context"] = _redact_sensitive(d["context"])
        return d


_SENSITIVE_KEYS = frozenset(
    {
        "api_key",
        "llm_api_key",
        "authorization",
        "password",
    }
)

# Endpoint settings whose values may embed user:password@ credentials
_URL_KEYS = frozenset(
    {
        "api_base",
        "base_url",
        "llm_base_url",
        "redis_url",
    }
)

_URL_CREDENTIALS_RE = re.compile(r"(?P<scheme>[a-z][a-z0-9+.-]*://)[^/@\s]+@", re.IGNORECASE)


def mask_url_credentials(text: str) -> str:
    """Mask the userinfo part of any URL in ``text``.

    ``redis://:hunter2@cache:6379/0`` becomes ``redis://***@cache:6379/0``.
    """
    return _URL_CREDENTIALS_RE.sub(r"\g<scheme>***@", text)


def _redact_sensitive(data: dict[str, Any]) -> dict[str, Any]:
    """Redact secret values and URL credentials (recursively)."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        lowered = key.lower()
        if lowered in _SENSITIVE_KEYS:
            result[key] = "[REDACTED]"
        elif lowered in _URL_KEYS and isinstance(value, str):
            result[key] = mask_url_credentials(value)
        elif isinstance(value, dict):
            result[key] = _redact_sensitive(value)
        else:
            result[key] = value
    return result


def create_structured_error(
    exc: BaseException,
    *,
    error_code: str = "",
    session_id: str = "",
    stage: str = "",
    recovered: bool = True,
    context: dict[str, Any] | None = None,
) -> StructuredError:
    """Create a StructuredError from an exception.

    If the exception has a `.code` attribute (a SportIQError subclass),
    it is used as the error_code unless overridden.
    """
    code = error_code or getattr(exc, "code", type(exc).__name__)
    stack = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return StructuredError(
        error_code=code,
        message=mask_url_credentials(str(exc)),
        stack_trace=mask_url_credentials("".join(stack)),
        context=context or {},
        session_id=session_id,
        stage=stage,
        recovered=recovered,
    )


def log_structured_error(
    logger: logging.Logger,
    exc: BaseException,
    *,
    error_code: str = "",
    session_id: str = "",
    stage: str = "",
    recovered: bool = True,
    context: dict[str, Any] | None = None,
    level: int = logging.WARNING,
) -> StructuredError:
    """Log an exception as a structured error and return the record."""
    structured = create_structured_error(
        exc,
        error_code=error_code,
        session_id=session_id,
        stage=stage,
        recovered=recovered,
        context=context,
    )
    logger.log(
        level,
        "structured_error code=%s stage=%s",
        structured.error_code,
        structured.stage,
        extra={"structured_error": structured.to_dict()},
    )
    return structured
