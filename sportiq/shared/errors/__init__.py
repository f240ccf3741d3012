"""Unified error hierarchy for the SportIQ query engine.

All domain errors inherit from SportIQError. Only ConfigurationMissingError
is allowed to escape the public engine entry points; every other failure is
recovered locally (degraded classification, field repair, clarification).
"""

from __future__ import annotations


class SportIQError(Exception):
    """Base error for all SportIQ exceptions."""

    def __init__(self, message: str, code: str = "SPORTIQ_ERROR") -> None:
        self.code = code
        super().__init__(message)


# -- Port errors (raised by Port implementations) --


class PortUnavailableError(SportIQError):
    """A Port dependency (LLM provider, cache backend) failed to answer."""

    def __init__(self, port_name: str, message: str = "") -> None:
        self.port_name = port_name
        super().__init__(
            message or f"Port {port_name} is unavailable",
            code="PORT_UNAVAILABLE",
        )


class PortTimeoutError(SportIQError):
    """A Port operation timed out."""

    def __init__(self, port_name: str, timeout_ms: int) -> None:
        self.port_name = port_name
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Port {port_name} timed out after {timeout_ms}ms",
            code="PORT_TIMEOUT",
        )


# -- Classification errors --


class MalformedResponseError(SportIQError):
    """Structured classifier output could not be parsed at all."""

    def __init__(self, message: str, raw: str = "") -> None:
        self.raw = raw
        super().__init__(message, code="MALFORMED_RESPONSE")


class ConfigurationMissingError(SportIQError):
    """Required external-service configuration (credentials) is absent.

    There is no local fallback for a misconfigured deployment, so this is
    the one error that propagates out of the engine.
    """

    def __init__(self, setting: str, message: str = "") -> None:
        self.setting = setting
        super().__init__(
            message or f"Required setting {setting} is not configured",
            code="CONFIGURATION_MISSING",
        )


class ValidationError(SportIQError):
    """Input or configuration validation failed."""

    def __init__(self, message: str, field: str = "") -> None:
        self.field = field
        super().__init__(message, code="VALIDATION")


__all__ = [
    "ConfigurationMissingError",
    "MalformedResponseError",
    "PortTimeoutError",
    "PortUnavailableError",
    "SportIQError",
    "ValidationError",
]
