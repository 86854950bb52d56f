"""
phasegate: phase-gated validation engine.

Drives a multi-phase workflow and, at every phase boundary, runs a scored,
possibly veto-bearing checkpoint that decides whether the workflow may
advance, must be refined, or must abort. Falls back to structural-only
checks when the heuristic "mind" cannot be loaded.

Example:
    import asyncio
    from phasegate import ScriptedExecutor, create_runtime, load_workflow
    from phasegate.resources import default_workflow_path

    runtime = create_runtime()
    workflow = load_workflow(default_workflow_path())
    executor = ScriptedExecutor({
        "discovery": {"endStateClarity": 0.85, "visionAlignment": 0.85},
        ...
    })
    result = asyncio.run(runtime.orchestrator.run(workflow, executor))
"""

# Application layer
from phasegate.application import (
    CallbackExecutor,
    MindArtifactStore,
    ScriptedExecutor,
    ScriptedRecoveryPolicy,
    SessionManager,
    StaticRecoveryPolicy,
    ValidationGateEngine,
    WorkflowOrchestrator,
    generate_criteria_failure_feedback,
    generate_success_feedback,
    generate_veto_feedback,
)

# Domain
from phasegate.domain.config import EngineConfig, ModePreference
from phasegate.domain.exceptions import (
    ConfigurationError,
    InvalidRecoveryError,
    MindArtifactError,
    PhaseGateError,
    UnknownHeuristicError,
)
from phasegate.domain.models import (
    CheckpointConfig,
    HeuristicId,
    HeuristicOutcome,
    MindArtifactBundle,
    MindUnavailable,
    Phase,
    PhaseResult,
    Recommendation,
    RecoveryAction,
    Session,
    ValidationResult,
    WorkflowDefinition,
    WorkflowMode,
    WorkflowResult,
    WorkflowStatus,
)

# Heuristics and validators
from phasegate.heuristics import HeuristicCompiler
from phasegate.infrastructure import (
    FilesystemMindSource,
    InMemoryMindSource,
    MetricsCollector,
    create_runtime,
    load_engine_config,
    load_workflow,
    setup_logging,
)
from phasegate.validators import AxiomaValidator, TaskAnatomyValidator

__version__ = "0.1.0"

__all__ = [
    # Application
    "CallbackExecutor",
    "MindArtifactStore",
    "ScriptedExecutor",
    "ScriptedRecoveryPolicy",
    "SessionManager",
    "StaticRecoveryPolicy",
    "ValidationGateEngine",
    "WorkflowOrchestrator",
    "generate_criteria_failure_feedback",
    "generate_success_feedback",
    "generate_veto_feedback",
    # Domain
    "EngineConfig",
    "ModePreference",
    "ConfigurationError",
    "InvalidRecoveryError",
    "MindArtifactError",
    "PhaseGateError",
    "UnknownHeuristicError",
    "CheckpointConfig",
    "HeuristicId",
    "HeuristicOutcome",
    "MindArtifactBundle",
    "MindUnavailable",
    "Phase",
    "PhaseResult",
    "Recommendation",
    "RecoveryAction",
    "Session",
    "ValidationResult",
    "WorkflowDefinition",
    "WorkflowMode",
    "WorkflowResult",
    "WorkflowStatus",
    # Heuristics / validators
    "HeuristicCompiler",
    "AxiomaValidator",
    "TaskAnatomyValidator",
    # Infrastructure
    "FilesystemMindSource",
    "InMemoryMindSource",
    "MetricsCollector",
    "create_runtime",
    "load_engine_config",
    "load_workflow",
    "setup_logging",
]
