"""
MetricsCollector: in-process aggregation behind the metrics hooks.

Every hook also logs a contract event through stdlib logging:
``<kind>_time_recorded`` (with ``duration_ms``), ``cache_hit_recorded``,
``cache_miss_recorded`` and ``fallback_recorded``.
"""

import logging
import math
import time
from collections import Counter, deque
from collections.abc import Callable, Mapping
from typing import Any

from phasegate.domain.interfaces import MetricsInterface

logger = logging.getLogger(__name__)

TIMER_KINDS = ("mind_load", "validation", "heuristic_exec")

FallbackListener = Callable[[str, int], None]


def percentile(values: list[float], pct: float) -> float:
    """Nearest-rank percentile; 0.0 for no values."""
    if not values:
        return 0.0
    ordered = sorted(values)
    rank = max(1, math.ceil(pct / 100 * len(ordered)))
    return ordered[rank - 1]


def _event(
    name: str, tags: Mapping[str, Any] | None, **fields: Any
) -> dict[str, Any]:
    # recorded fields win over caller tags of the same name
    return {"event": name, "metadata": {**(tags or {}), **fields}}


class MetricsCollector(MetricsInterface):
    """
    Collects timings, cache hits and fallbacks.

    Args:
        enabled: When False every hook is a no-op and ``end_timer`` returns 0
        max_metrics: Durations kept per timer kind (oldest dropped first)
        clock: Monotonic clock in seconds, injectable for tests
    """

    def __init__(
        self,
        enabled: bool = True,
        max_metrics: int = 1000,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.enabled = enabled
        self.max_metrics = max_metrics
        self._clock = clock
        self._listeners: list[FallbackListener] = []
        self.reset()

    def reset(self) -> None:
        self._timers: dict[str, tuple[str, float]] = {}
        self._durations: dict[str, deque[float]] = {}
        self._first_mind_load_ms: float | None = None
        self._cache_hits = 0
        self._cache_misses = 0
        self._fallbacks: Counter[str] = Counter()

    def add_fallback_listener(self, listener: FallbackListener) -> None:
        """Call ``listener(reason, count)`` after every recorded fallback."""
        self._listeners.append(listener)

    # ------------------------------------------------------------------ #
    # MetricsInterface
    # ------------------------------------------------------------------ #

    def start_timer(
        self, timer_id: str, kind: str, tags: Mapping[str, Any] | None = None
    ) -> None:
        if not self.enabled:
            return
        self._timers[timer_id] = (kind, self._clock())

    def end_timer(
        self, timer_id: str, tags: Mapping[str, Any] | None = None
    ) -> float:
        if not self.enabled:
            return 0.0
        started = self._timers.pop(timer_id, None)
        if started is None:
            logger.debug("end_timer for unknown timer %s", timer_id)
            return 0.0

        kind, start = started
        duration_ms = (self._clock() - start) * 1000
        self._durations.setdefault(kind, deque(maxlen=self.max_metrics)).append(
            duration_ms
        )
        if kind == "mind_load" and self._first_mind_load_ms is None:
            self._first_mind_load_ms = duration_ms

        event = f"{kind}_time_recorded"
        logger.info(
            event,
            extra=_event(event, tags, duration_ms=duration_ms),
        )
        return duration_ms

    def record_cache_hit(self, tags: Mapping[str, Any] | None = None) -> None:
        if not self.enabled:
            return
        self._cache_hits += 1
        logger.debug(
            "cache_hit_recorded",
            extra=_event("cache_hit_recorded", tags, count=self._cache_hits),
        )

    def record_cache_miss(self, tags: Mapping[str, Any] | None = None) -> None:
        if not self.enabled:
            return
        self._cache_misses += 1
        logger.debug(
            "cache_miss_recorded",
            extra=_event("cache_miss_recorded", tags, count=self._cache_misses),
        )

    def record_fallback(
        self, reason: str, tags: Mapping[str, Any] | None = None
    ) -> None:
        if not self.enabled:
            return
        self._fallbacks[reason] += 1
        count = self._fallbacks[reason]
        logger.warning(
            "fallback_recorded",
            extra=_event("fallback_recorded", tags, reason=reason, count=count),
        )
        for listener in self._listeners:
            listener(reason, count)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def durations(self, kind: str) -> list[float]:
        return list(self._durations.get(kind, ()))

    def fallback_counts(self) -> dict[str, int]:
        return dict(self._fallbacks)

    def get_cache_hit_rate(self) -> float:
        """Hit rate in percent; 0 when nothing was recorded."""
        total = self._cache_hits + self._cache_misses
        if total == 0:
            return 0.0
        return self._cache_hits / total * 100

    def get_summary(self) -> dict[str, Any]:
        loads = self.durations("mind_load")
        validations = self.durations("validation")
        return {
            "mind_loading": {
                "total": len(loads),
                "first_load_ms": self._first_mind_load_ms,
                "cached": self._cache_hits,
            },
            "validation": {
                "count": len(validations),
                "avg_ms": sum(validations) / len(validations) if validations else 0.0,
                "p95_ms": percentile(validations, 95),
                "p99_ms": percentile(validations, 99),
            },
            "cache": {
                "hits": self._cache_hits,
                "misses": self._cache_misses,
                "hit_rate": self.get_cache_hit_rate(),
            },
            "fallbacks": {
                "total": sum(self._fallbacks.values()),
                "by_reason": dict(self._fallbacks),
            },
            "heuristics": {"executions": len(self.durations("heuristic_exec"))},
        }
