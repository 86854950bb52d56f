"""Composition root: wires store, sessions, engine, metrics and alerts."""

from dataclasses import dataclass
from pathlib import Path

from phasegate.application.orchestrator import WorkflowOrchestrator
from phasegate.application.session import SessionManager
from phasegate.domain.config import EngineConfig
from phasegate.domain.interfaces import MindSourceInterface
from phasegate.resources import default_mind_path

from .alerts import FallbackAlertSystem
from .metrics import MetricsCollector
from .persistence import FilesystemMindSource, InMemoryRunEventStore


@dataclass
class PhaseGateRuntime:
    """Everything a host needs to run workflows in one process."""

    config: EngineConfig
    metrics: MetricsCollector
    alerts: FallbackAlertSystem
    events: InMemoryRunEventStore
    sessions: SessionManager
    orchestrator: WorkflowOrchestrator


def create_runtime(
    config: EngineConfig | None = None,
    source: MindSourceInterface | None = None,
    reload_on_change: bool = False,
) -> PhaseGateRuntime:
    """
    Build a runtime with its own mind store.

    Args:
        config: Engine settings; defaults when None
        source: Mind source; defaults to ``config.mind_path`` or the packaged
            default mind document
        reload_on_change: Reload the mind when its source changes between phases
    """
    config = config or EngineConfig()
    metrics = MetricsCollector()
    alerts = FallbackAlertSystem(
        metrics, config.alert_thresholds, config.alert_cooldown_seconds
    )
    alerts.attach()

    if source is None:
        path = Path(config.mind_path) if config.mind_path else default_mind_path()
        source = FilesystemMindSource(path)

    sessions = SessionManager.for_source(source, metrics)
    events = InMemoryRunEventStore()
    orchestrator = WorkflowOrchestrator(
        sessions,
        config=config,
        metrics=metrics,
        event_store=events,
        reload_on_change=reload_on_change,
    )
    return PhaseGateRuntime(
        config=config,
        metrics=metrics,
        alerts=alerts,
        events=events,
        sessions=sessions,
        orchestrator=orchestrator,
    )
