"""
Infrastructure layer for the phase-gated validation engine.

Contains adapters: mind sources, run trace storage, metrics aggregation,
fallback alerting, configuration loading, logging setup and the runtime
composition root.
"""

from phasegate.infrastructure.alerts import AlertLevel, FallbackAlert, FallbackAlertSystem
from phasegate.infrastructure.config import (
    apply_env_overrides,
    engine_config_from_dict,
    load_engine_config,
    load_workflow,
)
from phasegate.infrastructure.logging_setup import setup_logging
from phasegate.infrastructure.metrics import MetricsCollector
from phasegate.infrastructure.persistence import (
    FilesystemMindSource,
    InMemoryMindSource,
    InMemoryRunEventStore,
)
from phasegate.infrastructure.runtime import PhaseGateRuntime, create_runtime

__all__ = [
    "AlertLevel",
    "FallbackAlert",
    "FallbackAlertSystem",
    "apply_env_overrides",
    "engine_config_from_dict",
    "load_engine_config",
    "load_workflow",
    "setup_logging",
    "MetricsCollector",
    "FilesystemMindSource",
    "InMemoryMindSource",
    "InMemoryRunEventStore",
    "PhaseGateRuntime",
    "create_runtime",
]
