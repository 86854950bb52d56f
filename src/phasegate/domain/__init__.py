"""
Domain layer for the phase-gated validation engine.

Contains pure data structures, port interfaces and domain exceptions.
Nothing here performs I/O.
"""

from phasegate.domain.exceptions import (
    ConfigurationError,
    InvalidRecoveryError,
    MindArtifactError,
    PhaseGateError,
    UnknownHeuristicError,
)
from phasegate.domain.interfaces import (
    MetricsInterface,
    MindSourceInterface,
    MindSourceSnapshot,
    NullMetrics,
    PhaseExecutorInterface,
    RecoveryPolicyInterface,
    RunEventStoreInterface,
    ValidatorInterface,
)
from phasegate.domain.models import (
    NO_VALIDATION,
    AgentContext,
    AxiomaDimension,
    AxiomaPolicy,
    CheckpointConfig,
    CompletedPhase,
    CriterionResult,
    GateState,
    Heuristic,
    HeuristicId,
    HeuristicOutcome,
    MindArtifactBundle,
    MindUnavailable,
    ModeDecision,
    Phase,
    PhaseResult,
    Recommendation,
    RecommendationBands,
    RecoveryAction,
    Session,
    Severity,
    ValidationResult,
    VetoDetail,
    WorkflowDefinition,
    WorkflowMode,
    WorkflowResult,
    WorkflowStatus,
)
from phasegate.domain.run_event import RunEvent, RunEventType

__all__ = [
    # Exceptions
    "PhaseGateError",
    "UnknownHeuristicError",
    "MindArtifactError",
    "ConfigurationError",
    "InvalidRecoveryError",
    # Interfaces
    "MindSourceInterface",
    "MindSourceSnapshot",
    "ValidatorInterface",
    "MetricsInterface",
    "NullMetrics",
    "PhaseExecutorInterface",
    "RecoveryPolicyInterface",
    "RunEventStoreInterface",
    # Models
    "NO_VALIDATION",
    "AgentContext",
    "AxiomaDimension",
    "AxiomaPolicy",
    "CheckpointConfig",
    "CompletedPhase",
    "CriterionResult",
    "GateState",
    "Heuristic",
    "HeuristicId",
    "HeuristicOutcome",
    "MindArtifactBundle",
    "MindUnavailable",
    "ModeDecision",
    "Phase",
    "PhaseResult",
    "Recommendation",
    "RecommendationBands",
    "RecoveryAction",
    "Session",
    "Severity",
    "ValidationResult",
    "VetoDetail",
    "WorkflowDefinition",
    "WorkflowMode",
    "WorkflowResult",
    "WorkflowStatus",
    # Run trace
    "RunEvent",
    "RunEventType",
]
