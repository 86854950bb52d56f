"""Engine configuration model."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from phasegate.domain.models import DEFAULT_SCORE_EPSILON, DEFAULT_THRESHOLD


class ModePreference(str, Enum):
    """AUTO picks PV whenever the mind is available; GENERIC never does."""

    AUTO = "AUTO"
    GENERIC = "GENERIC"


@dataclass(frozen=True)
class AlertThresholds:
    """Fallback counts at which each alert level starts."""

    info: int = 1
    warning: int = 5
    critical: int = 10


@dataclass(frozen=True)
class EngineConfig:
    """Runtime settings for the gate engine and orchestrator."""

    mode: ModePreference = ModePreference.AUTO
    heuristics_enabled: bool = True
    axioma_enabled: bool = True
    minimum_score: float = DEFAULT_THRESHOLD
    score_epsilon: float = DEFAULT_SCORE_EPSILON
    max_retries: int = 3
    mind_path: str | None = None
    alert_thresholds: AlertThresholds = field(default_factory=AlertThresholds)
    alert_cooldown_seconds: float = 300.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EngineConfig":
        defaults = cls()
        alerts = data.get("alerts", {})
        thresholds = alerts.get("thresholds", {})
        return cls(
            mode=ModePreference(data.get("mode", defaults.mode.value)),
            heuristics_enabled=data.get(
                "heuristics_enabled", defaults.heuristics_enabled
            ),
            axioma_enabled=data.get("axioma_enabled", defaults.axioma_enabled),
            minimum_score=float(data.get("minimum_score", defaults.minimum_score)),
            score_epsilon=float(data.get("score_epsilon", defaults.score_epsilon)),
            max_retries=int(data.get("max_retries", defaults.max_retries)),
            mind_path=data.get("mind_path", defaults.mind_path),
            alert_thresholds=AlertThresholds(
                info=thresholds.get("info", defaults.alert_thresholds.info),
                warning=thresholds.get("warning", defaults.alert_thresholds.warning),
                critical=thresholds.get(
                    "critical", defaults.alert_thresholds.critical
                ),
            ),
            alert_cooldown_seconds=float(
                alerts.get("cooldown_seconds", defaults.alert_cooldown_seconds)
            ),
        )
