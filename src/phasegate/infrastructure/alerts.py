"""
FallbackAlertSystem: raises alerts when fallbacks pile up.

Counts come from the MetricsCollector. Each (reason, level) pair has its own
cooldown so a persistent problem is reported once per window rather than on
every fallback.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from phasegate.domain.config import AlertThresholds

from .metrics import MetricsCollector

logger = logging.getLogger(__name__)


class AlertLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


_LOG_LEVELS = {
    AlertLevel.INFO: logging.INFO,
    AlertLevel.WARNING: logging.WARNING,
    AlertLevel.CRITICAL: logging.CRITICAL,
}


@dataclass(frozen=True)
class FallbackAlert:
    """An alert that was emitted."""

    reason: str
    level: AlertLevel
    count: int
    message: str
    recommendation: str
    triggered_at: float


class FallbackAlertSystem:
    """
    Turns fallback counts into leveled, rate-limited alerts.

    Args:
        metrics: Source of fallback counts
        thresholds: Counts at which info, warning and critical begin
        cooldown_seconds: Minimum gap between alerts for one (reason, level)
        clock: Seconds clock, injectable for tests
    """

    def __init__(
        self,
        metrics: MetricsCollector,
        thresholds: AlertThresholds | None = None,
        cooldown_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._metrics = metrics
        self.thresholds = thresholds or AlertThresholds()
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._last_sent: dict[tuple[str, AlertLevel], float] = {}
        self._active: dict[str, FallbackAlert] = {}

    def attach(self) -> None:
        """Check rates automatically whenever a fallback is recorded."""
        self._metrics.add_fallback_listener(lambda reason, count: self.check_fallback_rates())

    def determine_alert_level(self, count: int) -> AlertLevel | None:
        if count >= self.thresholds.critical:
            return AlertLevel.CRITICAL
        if count >= self.thresholds.warning:
            return AlertLevel.WARNING
        if count >= self.thresholds.info:
            return AlertLevel.INFO
        return None

    def should_send_alert(self, reason: str, level: AlertLevel) -> bool:
        last = self._last_sent.get((reason, level))
        return last is None or self._clock() - last >= self.cooldown_seconds

    def record_alert(self, reason: str, level: AlertLevel) -> None:
        self._last_sent[(reason, level)] = self._clock()

    def get_recommendation(self, reason: str, count: int) -> str:
        systematic = count >= self.thresholds.critical
        if reason == "mind_load_failed":
            if systematic:
                return (
                    "High frequency of mind load failures indicates a systematic "
                    "issue with the mind document or its storage"
                )
            return "Check the mind document configuration for syntax errors and required fields"
        if reason == "generic_mode":
            if systematic:
                return (
                    "Persistent Generic-mode fallbacks: PV validation is effectively "
                    "disabled until mind artifacts are restored"
                )
            return "Workflows are running structural-only checks; restore mind artifacts to re-enable PV validation"
        return f"Investigate root cause of '{reason}' fallbacks in the logs"

    def format_alert_message(self, reason: str, level: AlertLevel, count: int) -> str:
        return (
            f"FALLBACK ALERT [{level.value.upper()}]: {reason} - {count} fallbacks. "
            f"Recommendation: {self.get_recommendation(reason, count)}"
        )

    def check_fallback_rates(self) -> list[FallbackAlert]:
        """Emit alerts for every reason whose count crossed a level."""
        emitted = []
        for reason, count in self._metrics.fallback_counts().items():
            level = self.determine_alert_level(count)
            if level is None or not self.should_send_alert(reason, level):
                continue
            alert = FallbackAlert(
                reason=reason,
                level=level,
                count=count,
                message=self.format_alert_message(reason, level, count),
                recommendation=self.get_recommendation(reason, count),
                triggered_at=self._clock(),
            )
            self.record_alert(reason, level)
            self._active[reason] = alert
            logger.log(
                _LOG_LEVELS[level],
                "alert_triggered",
                extra={
                    "event": "alert_triggered",
                    "metadata": {
                        "reason": reason,
                        "level": level.value,
                        "count": count,
                        "message": alert.message,
                    },
                },
            )
            emitted.append(alert)
        return emitted

    def get_status(self) -> dict[str, Any]:
        return {
            "thresholds": {
                "info": self.thresholds.info,
                "warning": self.thresholds.warning,
                "critical": self.thresholds.critical,
            },
            "cooldown_seconds": self.cooldown_seconds,
            "active_alerts": [
                {"reason": a.reason, "level": a.level.value, "count": a.count}
                for a in self._active.values()
            ],
        }
