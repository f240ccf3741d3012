"""Query-understanding SLI metrics for Prometheus.

Metrics:
1. sportiq_understand_duration_seconds  - full understand() latency
2. sportiq_llm_call_duration_seconds    - language-model classifier latency
3. sportiq_classification_cache_total   - cache lookups by status (hit/miss)
4. sportiq_resolution_stage_total       - which stage produced the answer
5. sportiq_llm_fallback_total           - degraded LLM calls by cohort
6. sportiq_clarification_total          - clarifying questions issued
"""

from __future__ import annotations

import time
from collections.abc import Generator  # noqa: TC003 -- used at runtime by contextmanager
from contextlib import contextmanager

from prometheus_client import CollectorRegistry, Counter, Histogram

# Latency buckets: 1ms to 10s (local stages are sub-millisecond, LLM calls are seconds)
_LATENCY_BUCKETS = (0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


def _histogram(
    name: str,
    documentation: str,
    registry: CollectorRegistry | None,
) -> Histogram:
    """Create a Histogram with optional registry."""
    if registry is not None:
        return Histogram(name, documentation, buckets=_LATENCY_BUCKETS, registry=registry)
    return Histogram(name, documentation, buckets=_LATENCY_BUCKETS)


def _counter(
    name: str,
    documentation: str,
    labelnames: list[str],
    registry: CollectorRegistry | None,
) -> Counter:
    """Create a Counter with optional registry."""
    if registry is not None:
        return Counter(name, documentation, labelnames, registry=registry)
    return Counter(name, documentation, labelnames)


class QuerySLI:
    """Central registry for query-understanding SLI metrics.

    Pass a custom CollectorRegistry for testing isolation.
    In production, use the default global registry (registry=None).
    """

    def __init__(self, *, registry: CollectorRegistry | None = None) -> None:
        self.understand_duration = _histogram(
            "sportiq_understand_duration_seconds",
            "Total time to understand one query",
            registry,
        )

        self.llm_call_duration = _histogram(
            "sportiq_llm_call_duration_seconds",
            "Time spent in the language-model classifier",
            registry,
        )

        self.cache_lookups = _counter(
            "sportiq_classification_cache_total",
            "Classification cache lookups",
            ["status"],
            registry,
        )

        self.resolution_stage = _counter(
            "sportiq_resolution_stage_total",
            "Stage that produced the final classification",
            ["stage"],
            registry,
        )

        self.llm_fallbacks = _counter(
            "sportiq_llm_fallback_total",
            "Language-model calls that degraded to keyword classification",
            ["cohort"],
            registry,
        )

        self.clarifications = _counter(
            "sportiq_clarification_total",
            "Clarifying questions returned instead of a classification",
            [],
            registry,
        )

    @contextmanager
    def timer(self, histogram: Histogram) -> Generator[None, None, None]:
        """Context manager that observes elapsed time on a histogram.

        Duration is always recorded, even if the block raises an exception.
        """
        start = time.monotonic()
        try:
            yield
        finally:
            histogram.observe(time.monotonic() - start)
