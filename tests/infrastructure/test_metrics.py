"""Tests for MetricsCollector."""

import logging

import pytest

from phasegate.infrastructure.metrics import MetricsCollector, percentile


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def metrics(clock: FakeClock) -> MetricsCollector:
    return MetricsCollector(clock=clock)


class TestTimers:
    """Timing hooks."""

    def test_end_timer_returns_milliseconds(self, metrics, clock):
        metrics.start_timer("t1", "validation")
        clock.advance(0.25)

        assert metrics.end_timer("t1") == pytest.approx(250.0)
        assert metrics.durations("validation") == [pytest.approx(250.0)]

    def test_unknown_timer(self, metrics):
        assert metrics.end_timer("never-started") == 0.0

    def test_timer_event_logged(self, metrics, clock, caplog):
        """Each finished timer logs <kind>_time_recorded with duration_ms."""
        metrics.start_timer("t1", "mind_load", {"cache": "mind"})
        clock.advance(0.01)

        with caplog.at_level(logging.INFO, logger="phasegate.infrastructure.metrics"):
            metrics.end_timer("t1", {"cache": "mind"})

        record = next(r for r in caplog.records if r.getMessage() == "mind_load_time_recorded")
        assert record.event == "mind_load_time_recorded"
        assert record.metadata["duration_ms"] == pytest.approx(10.0)
        assert record.metadata["cache"] == "mind"

    def test_tags_named_like_recorded_fields(self, metrics, clock, caplog):
        """Tags never clash with the fields a hook records itself."""
        metrics.start_timer("t1", "validation")
        clock.advance(0.005)

        with caplog.at_level(logging.INFO, logger="phasegate.infrastructure.metrics"):
            duration = metrics.end_timer("t1", {"name": "gate", "duration_ms": -1})

        record = caplog.records[-1]
        assert record.metadata["name"] == "gate"
        assert record.metadata["duration_ms"] == duration == pytest.approx(5.0)

    def test_first_mind_load_kept(self, metrics, clock):
        for seconds in (0.2, 0.05):
            metrics.start_timer("load", "mind_load")
            clock.advance(seconds)
            metrics.end_timer("load")

        summary = metrics.get_summary()["mind_loading"]
        assert summary["total"] == 2
        assert summary["first_load_ms"] == pytest.approx(200.0)

    def test_max_metrics_bounds_history(self, clock):
        metrics = MetricsCollector(max_metrics=3, clock=clock)
        for i in range(5):
            metrics.start_timer(f"t{i}", "validation")
            clock.advance(0.001 * (i + 1))
            metrics.end_timer(f"t{i}")

        assert len(metrics.durations("validation")) == 3


class TestCacheAndFallbacks:
    """Cache and fallback counters."""

    def test_hit_rate(self, metrics):
        metrics.record_cache_miss()
        for _ in range(3):
            metrics.record_cache_hit()
        assert metrics.get_cache_hit_rate() == 75.0

    def test_hit_rate_without_data(self, metrics):
        assert metrics.get_cache_hit_rate() == 0.0

    def test_fallbacks_by_reason(self, metrics, caplog):
        with caplog.at_level(logging.WARNING, logger="phasegate.infrastructure.metrics"):
            metrics.record_fallback("mind_load_failed")
            metrics.record_fallback("mind_load_failed")
            metrics.record_fallback("generic_mode")

        assert metrics.fallback_counts() == {"mind_load_failed": 2, "generic_mode": 1}
        assert [r.event for r in caplog.records] == ["fallback_recorded"] * 3

    def test_fallback_tags_named_like_recorded_fields(self, metrics, caplog):
        with caplog.at_level(logging.WARNING, logger="phasegate.infrastructure.metrics"):
            metrics.record_fallback("generic_mode", {"reason": "other", "count": 99})

        metadata = caplog.records[-1].metadata
        assert metadata["reason"] == "generic_mode"
        assert metadata["count"] == 1

    def test_cache_tags_named_like_recorded_fields(self, metrics):
        metrics.record_cache_hit({"count": 5, "name": "mind"})
        metrics.record_cache_miss({"count": 5})
        assert metrics.get_cache_hit_rate() == 50.0

    def test_fallback_listeners(self, metrics):
        calls = []
        metrics.add_fallback_listener(lambda reason, count: calls.append((reason, count)))

        metrics.record_fallback("generic_mode")
        metrics.record_fallback("generic_mode")

        assert calls == [("generic_mode", 1), ("generic_mode", 2)]


class TestSummary:
    def test_summary_shape(self, metrics, clock):
        for ms in (10, 20, 30, 40):
            metrics.start_timer("v", "validation")
            clock.advance(ms / 1000)
            metrics.end_timer("v")
        metrics.start_timer("h", "heuristic_exec")
        metrics.end_timer("h")
        metrics.record_fallback("generic_mode")

        summary = metrics.get_summary()

        assert summary["validation"]["count"] == 4
        assert summary["validation"]["avg_ms"] == pytest.approx(25.0)
        assert summary["validation"]["p95_ms"] == pytest.approx(40.0)
        assert summary["heuristics"] == {"executions": 1}
        assert summary["fallbacks"] == {"total": 1, "by_reason": {"generic_mode": 1}}

    def test_disabled_collector_records_nothing(self, clock):
        metrics = MetricsCollector(enabled=False, clock=clock)
        metrics.start_timer("v", "validation")
        clock.advance(1)

        assert metrics.end_timer("v") == 0.0
        metrics.record_fallback("generic_mode")
        metrics.record_cache_hit()
        assert metrics.fallback_counts() == {}
        assert metrics.get_summary()["cache"]["hits"] == 0

    def test_reset(self, metrics):
        metrics.record_cache_hit()
        metrics.record_fallback("x")
        metrics.reset()
        assert metrics.get_summary()["cache"]["hits"] == 0
        assert metrics.fallback_counts() == {}


class TestPercentile:
    def test_nearest_rank(self):
        values = list(range(1, 101))
        assert percentile(values, 95) == 95
        assert percentile(values, 99) == 99

    def test_empty(self):
        assert percentile([], 95) == 0.0
