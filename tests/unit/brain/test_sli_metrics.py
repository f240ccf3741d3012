"""Tests for query-understanding SLI instrumentation.

- understand_duration_seconds (Histogram)
- llm_call_duration_seconds (Histogram)
- classification_cache_total (Counter, labels: status=hit|miss)
- resolution_stage_total (Counter, labels: stage)
- llm_fallback_total (Counter, labels: cohort)
- clarification_total (Counter)
"""

from __future__ import annotations

import time

import pytest
from prometheus_client import CollectorRegistry

from sportiq.brain.metrics.sli import QuerySLI


class TestQuerySLICreation:
    """QuerySLI is constructable and registers every metric."""

    def test_creates_histograms(self, sli: QuerySLI) -> None:
        assert sli.understand_duration is not None
        assert sli.llm_call_duration is not None

    def test_creates_counters(self, sli: QuerySLI) -> None:
        assert sli.cache_lookups is not None
        assert sli.resolution_stage is not None
        assert sli.llm_fallbacks is not None
        assert sli.clarifications is not None

    def test_separate_registries_do_not_collide(self) -> None:
        QuerySLI(registry=CollectorRegistry())
        QuerySLI(registry=CollectorRegistry())


class TestHistogramObserve:
    def test_understand_observe(self, sli: QuerySLI, registry: CollectorRegistry) -> None:
        sli.understand_duration.observe(0.004)
        samples = _get_samples(registry, "sportiq_understand_duration_seconds")
        assert any(s.value > 0 for s in samples)

    def test_llm_call_observe(self, sli: QuerySLI, registry: CollectorRegistry) -> None:
        sli.llm_call_duration.observe(1.2)
        samples = _get_samples(registry, "sportiq_llm_call_duration_seconds")
        assert any(s.value > 0 for s in samples)


class TestCounterIncrement:
    def test_cache_hit_increment(self, sli: QuerySLI, registry: CollectorRegistry) -> None:
        sli.cache_lookups.labels(status="hit").inc()
        samples = _get_samples(registry, "sportiq_classification_cache_total")
        hit_samples = [
            s for s in samples if s.labels.get("status") == "hit" and s.name.endswith("_total")
        ]
        assert any(s.value == 1.0 for s in hit_samples)

    def test_cache_miss_increment(self, sli: QuerySLI, registry: CollectorRegistry) -> None:
        sli.cache_lookups.labels(status="miss").inc(3)
        samples = _get_samples(registry, "sportiq_classification_cache_total")
        miss_samples = [
            s for s in samples if s.labels.get("status") == "miss" and s.name.endswith("_total")
        ]
        assert any(s.value == 3.0 for s in miss_samples)

    def test_stage_labels(self, sli: QuerySLI, registry: CollectorRegistry) -> None:
        sli.resolution_stage.labels(stage="pattern").inc()
        sli.resolution_stage.labels(stage="llm").inc(2)
        value = registry.get_sample_value("sportiq_resolution_stage_total", {"stage": "llm"})
        assert value == 2.0

    def test_fallback_by_cohort(self, sli: QuerySLI, registry: CollectorRegistry) -> None:
        sli.llm_fallbacks.labels(cohort="strict").inc()
        value = registry.get_sample_value("sportiq_llm_fallback_total", {"cohort": "strict"})
        assert value == 1.0

    def test_clarification_unlabelled(self, sli: QuerySLI, registry: CollectorRegistry) -> None:
        sli.clarifications.inc()
        assert registry.get_sample_value("sportiq_clarification_total") == 1.0


class TestTimerContextManager:
    """QuerySLI.timer() context manager for auto-observing duration."""

    def test_timer_records_duration(self, sli: QuerySLI, registry: CollectorRegistry) -> None:
        with sli.timer(sli.understand_duration):
            time.sleep(0.01)

        samples = _get_samples(registry, "sportiq_understand_duration_seconds")
        sum_samples = [s for s in samples if s.name.endswith("_sum")]
        assert any(s.value >= 0.01 for s in sum_samples)

    def test_timer_records_on_exception(self, sli: QuerySLI, registry: CollectorRegistry) -> None:
        with pytest.raises(ValueError), sli.timer(sli.llm_call_duration):
            raise ValueError("boom")

        samples = _get_samples(registry, "sportiq_llm_call_duration_seconds")
        count_samples = [s for s in samples if s.name.endswith("_count")]
        assert any(s.value == 1.0 for s in count_samples)


def _get_samples(
    registry: CollectorRegistry,
    metric_name: str,
) -> list:
    """Collect all samples matching a metric name prefix."""
    result = []
    for metric in registry.collect():
        for sample in metric.samples:
            if sample.name.startswith(metric_name):
                result.append(sample)
    return result
