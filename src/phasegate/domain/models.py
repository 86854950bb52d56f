"""
Domain models for the phase-gated validation engine.

These are pure data structures shared by every layer: heuristic outcomes,
validation results, phase and checkpoint descriptors, sessions and the mind
artifact bundle. All models are immutable (frozen dataclasses) so that a
result handed to the orchestrator, the feedback generator and reporting is
the same value everywhere.
"""

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any

from phasegate.domain.exceptions import UnknownHeuristicError

NO_VALIDATION = "none"
DEFAULT_THRESHOLD = 7.0
DEFAULT_SCORE_EPSILON = 0.005
MAX_SCORE = 10.0


def freeze(value: Any) -> Any:
    """Recursively convert dicts to read-only mappings and lists to tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, list | tuple):
        return tuple(freeze(v) for v in value)
    if isinstance(value, set | frozenset):
        return frozenset(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of freeze(), producing plain JSON-compatible containers."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, tuple | list):
        return [thaw(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    return value


def _empty_mapping() -> Mapping[str, Any]:
    return MappingProxyType({})


# =============================================================================
# HEURISTIC IDENTITY AND RECOMMENDATIONS
# =============================================================================


class HeuristicId(str, Enum):
    """Closed set of registered phase heuristics."""

    STRATEGIC_ALIGNMENT = "PV_BS_001"
    COHERENCE_SCAN = "PV_PA_001"
    AUTOMATION_READINESS = "PV_PM_001"

    @classmethod
    def parse(cls, value: "str | HeuristicId") -> "HeuristicId":
        """Resolve an identifier string, raising UnknownHeuristicError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownHeuristicError(value) from None


class Recommendation(str, Enum):
    """Fixed vocabulary attached to every scored result."""

    APPROVE = "APPROVE"
    REFINE = "REFINE"
    DEFER = "DEFER"
    REJECT = "REJECT"
    PROCEED = "PROCEED"
    ADD_GUARDRAILS_FIRST = "ADD_GUARDRAILS_FIRST"
    IMPROVE_READINESS = "IMPROVE_READINESS"

    @property
    def is_terminal(self) -> bool:
        return self in (Recommendation.REJECT, Recommendation.ADD_GUARDRAILS_FIRST)


class Severity(str, Enum):
    """How loudly a result should be surfaced."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def meets_threshold(
    score: float, threshold: float, epsilon: float = DEFAULT_SCORE_EPSILON
) -> bool:
    """Inclusive threshold comparison with a small floating-point allowance."""
    return score >= threshold - epsilon


@dataclass(frozen=True)
class RecommendationBands:
    """
    Maps a score onto a heuristic's recommendation vocabulary.

    A score at or above the threshold gets ``passing``; a score within
    ``margin`` below it gets ``marginal``; anything lower gets ``failing``.
    """

    passing: Recommendation
    marginal: Recommendation
    failing: Recommendation
    margin: float = 0.5

    def classify(
        self,
        score: float,
        threshold: float = DEFAULT_THRESHOLD,
        epsilon: float = DEFAULT_SCORE_EPSILON,
    ) -> Recommendation:
        if meets_threshold(score, threshold, epsilon):
            return self.passing
        if meets_threshold(score, threshold - self.margin, epsilon):
            return self.marginal
        return self.failing


# =============================================================================
# HEURISTIC OUTCOMES
# =============================================================================


@dataclass(frozen=True)
class CriterionResult:
    """One checked criterion with the observed and expected values."""

    criterion: str
    passed: bool
    actual: Any
    expected: Any
    message: str = ""


@dataclass(frozen=True)
class VetoDetail:
    """Who or what breached an absolute rule, and by how much."""

    veto_type: str  # machine-readable, e.g. TRUTHFULNESS_BELOW_THRESHOLD
    actor: str
    value: Any
    threshold: Any
    message: str = ""


@dataclass(frozen=True)
class HeuristicOutcome:
    """
    Result of evaluating one heuristic against a context.

    A vetoed outcome always carries score 0 and a terminal recommendation,
    whatever the evaluator computed before the veto fired.
    """

    score: float
    recommendation: Recommendation
    veto_triggered: bool = False
    veto_reason: str | None = None
    criteria: tuple[CriterionResult, ...] = ()
    vetoes: tuple[VetoDetail, ...] = ()
    missing_fields: tuple[str, ...] = ()
    details: Mapping[str, Any] = field(default_factory=_empty_mapping)

    def __post_init__(self) -> None:
        if self.veto_triggered:
            object.__setattr__(self, "score", 0.0)
            if not self.recommendation.is_terminal:
                object.__setattr__(self, "recommendation", Recommendation.REJECT)
        if not isinstance(self.details, MappingProxyType):
            object.__setattr__(self, "details", freeze(dict(self.details)))


@dataclass(frozen=True)
class Heuristic:
    """A compiled heuristic: stable id plus a pure evaluation function."""

    heuristic_id: HeuristicId
    name: str
    evaluator: Callable[[Mapping[str, Any]], HeuristicOutcome]
    bands: RecommendationBands
    threshold: float | None = None  # pass bar set by the mind document

    def evaluate(self, context: Mapping[str, Any]) -> HeuristicOutcome:
        return self.evaluator(context)

    __call__ = evaluate


# =============================================================================
# AXIOMA QUALITY DIMENSIONS
# =============================================================================


@dataclass(frozen=True)
class AxiomaDimension:
    """A weighted quality dimension; ``value`` is set once scored."""

    name: str
    weight: float
    value: float | None = None


@dataclass(frozen=True)
class AxiomaPolicy:
    """Dimension set and the penalty constants applied by the validator."""

    dimensions: tuple[AxiomaDimension, ...]
    critical_floor: float = 0.50
    critical_penalty: float = 0.91
    violation_floor: float = 0.70
    violation_display_limit: int = 5

    @property
    def dimension_names(self) -> tuple[str, ...]:
        return tuple(d.name for d in self.dimensions)


# =============================================================================
# VALIDATION RESULT
# =============================================================================


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of one checkpoint invocation.

    ``to_dict()`` is the stable JSON contract consumed by the orchestrator,
    reporting and tests. A vetoed result can never be a passing one.
    """

    gate: str
    passed: bool
    score: float = 0.0
    veto: bool = False
    veto_reason: str | None = None
    recommendation: Recommendation | None = None
    feedback: tuple[str, ...] = ()
    violations: tuple[str, ...] = ()
    violations_count: int | str | None = None
    missing_fields: tuple[str, ...] = ()
    criteria: tuple[CriterionResult, ...] = ()
    vetoes: tuple[VetoDetail, ...] = ()
    severity: Severity = Severity.INFO
    skipped: bool = False
    error: bool = False
    message: str | None = None
    threshold: float | None = None
    details: Mapping[str, Any] = field(default_factory=_empty_mapping)

    def __post_init__(self) -> None:
        if self.veto and self.passed:
            raise ValueError(f"Gate {self.gate!r}: a vetoed result cannot pass")
        if not isinstance(self.details, MappingProxyType):
            object.__setattr__(self, "details", freeze(dict(self.details)))

    @classmethod
    def skipped_result(cls, gate: str) -> "ValidationResult":
        """Generic-mode bypass for phases without validation."""
        return cls(
            gate=gate,
            passed=True,
            skipped=True,
            message="No validation configured",
        )

    @classmethod
    def configuration_error(cls, gate: str, message: str) -> "ValidationResult":
        return cls(
            gate=gate,
            passed=False,
            error=True,
            message=message,
            severity=Severity.ERROR,
            feedback=(message,),
        )

    def with_feedback(self, *lines: str) -> "ValidationResult":
        return replace(self, feedback=tuple(line for line in lines if line))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "gate": self.gate,
            "passed": self.passed,
            "score": self.score,
            "veto": self.veto,
            "vetoReason": self.veto_reason,
            "recommendation": (
                self.recommendation.value if self.recommendation else None
            ),
            "feedback": list(self.feedback),
        }
        if self.skipped:
            data["skipped"] = True
        if self.error:
            data["error"] = True
        if self.message:
            data["message"] = self.message
        if self.severity is not Severity.INFO:
            data["severity"] = self.severity.value
        if self.violations:
            data["violations"] = list(self.violations)
        if self.violations_count is not None:
            data["violationsCount"] = self.violations_count
        if self.missing_fields:
            data["missingFields"] = list(self.missing_fields)
        if self.details:
            data["details"] = thaw(self.details)
        return data


# =============================================================================
# PHASES AND CHECKPOINTS
# =============================================================================


@dataclass(frozen=True)
class CheckpointConfig:
    """Checkpoint attached to a phase boundary."""

    checkpoint: str
    heuristic: str | None = None
    validator: str | None = None
    criteria: tuple[str, ...] = ()
    veto_conditions: tuple[str, ...] = ()
    feedback_on_failure: tuple[str, ...] = ()
    threshold: float | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CheckpointConfig":
        threshold = data.get("threshold")
        return cls(
            checkpoint=str(data["checkpoint"]),
            heuristic=data.get("heuristic"),
            validator=data.get("validator"),
            criteria=tuple(data.get("criteria", ())),
            veto_conditions=tuple(data.get("veto_conditions", ())),
            feedback_on_failure=tuple(data.get("feedback_on_failure", ())),
            threshold=float(threshold) if threshold is not None else None,
        )


@dataclass(frozen=True)
class Phase:
    """A workflow phase; ``validation`` is a checkpoint or the string 'none'."""

    name: str
    validation: CheckpointConfig | str = NO_VALIDATION
    description: str = ""

    @property
    def checkpoint(self) -> CheckpointConfig | None:
        if isinstance(self.validation, CheckpointConfig):
            return self.validation
        return None

    @property
    def checkpoint_name(self) -> str | None:
        cp = self.checkpoint
        return cp.checkpoint if cp else None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Phase":
        raw = data.get("validation", NO_VALIDATION)
        validation: CheckpointConfig | str
        if isinstance(raw, Mapping):
            validation = CheckpointConfig.from_dict(raw)
        else:
            validation = NO_VALIDATION
        return cls(
            name=str(data["name"]),
            validation=validation,
            description=data.get("description", ""),
        )


@dataclass(frozen=True)
class WorkflowDefinition:
    """Ordered phases of one workflow."""

    name: str
    phases: tuple[Phase, ...]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkflowDefinition":
        return cls(
            name=str(data.get("name", "workflow")),
            phases=tuple(Phase.from_dict(p) for p in data["phases"]),
        )


# =============================================================================
# WORKFLOW EXECUTION STATE
# =============================================================================


class WorkflowMode(str, Enum):
    """PV is heuristic-backed; GENERIC is the structural-only fallback."""

    PV = "PV"
    GENERIC = "GENERIC"


class GateState(str, Enum):
    """Checkpoint state machine: PENDING then one terminal state."""

    PENDING = "PENDING"
    PASSED = "PASSED"
    FAILED = "FAILED"
    VETOED = "VETOED"


class RecoveryAction(str, Enum):
    """Caller choices after a failed gate. Values are the feedback labels."""

    FIX_AND_RETRY = "FIX"
    SKIP_VALIDATION = "SKIP VALIDATION"
    ABORT_WORKFLOW = "ABORT WORKFLOW"


def recovery_options_for(result: ValidationResult) -> tuple[RecoveryAction, ...]:
    """Options the caller may pick; skipping is withheld after a veto."""
    if result.passed:
        return ()
    if result.veto:
        return (RecoveryAction.FIX_AND_RETRY, RecoveryAction.ABORT_WORKFLOW)
    return (
        RecoveryAction.FIX_AND_RETRY,
        RecoveryAction.SKIP_VALIDATION,
        RecoveryAction.ABORT_WORKFLOW,
    )


@dataclass(frozen=True)
class ModeDecision:
    """One entry in a run's mode history."""

    mode: WorkflowMode
    reason: str
    timestamp: str  # ISO 8601


@dataclass(frozen=True)
class CompletedPhase:
    """A finished phase as seen by later phases. Output is read-only."""

    name: str
    mode: WorkflowMode
    output: Mapping[str, Any]
    validation: ValidationResult

    def __post_init__(self) -> None:
        if not isinstance(self.output, MappingProxyType):
            object.__setattr__(self, "output", freeze(dict(self.output)))


@dataclass(frozen=True)
class AgentContext:
    """The only state handed to a phase executor."""

    phase: Phase
    mode: WorkflowMode
    next_checkpoint: str | None
    previous_phases: tuple[CompletedPhase, ...] = ()
    last_result: ValidationResult | None = None  # set on fix-and-retry

    def phase_output(self, name: str) -> Mapping[str, Any]:
        for completed in self.previous_phases:
            if completed.name == name:
                return completed.output
        raise KeyError(f"Phase {name!r} has not completed")

    def to_dict(self) -> dict[str, Any]:
        return {
            "workflow": {
                "phase": self.phase.name,
                "mode": self.mode.value,
                "validation": {"next_checkpoint": self.next_checkpoint},
                "previous_phases": [
                    {
                        "name": p.name,
                        "mode": p.mode.value,
                        "output": thaw(p.output),
                        "passed": p.validation.passed,
                    }
                    for p in self.previous_phases
                ],
            }
        }


@dataclass(frozen=True)
class PhaseResult:
    """Outcome of running a single phase through its gate."""

    phase: Phase
    mode: WorkflowMode
    output: Mapping[str, Any]
    validation: ValidationResult
    attempt: int = 1
    validation_skipped: bool = False  # caller opted out after a failure

    def __post_init__(self) -> None:
        if not isinstance(self.output, MappingProxyType):
            object.__setattr__(self, "output", freeze(dict(self.output)))

    @property
    def gate_state(self) -> GateState:
        if self.validation.veto:
            return GateState.VETOED
        if self.validation.passed:
            return GateState.PASSED
        return GateState.FAILED

    @property
    def passed(self) -> bool:
        return self.validation.passed

    @property
    def recovery_options(self) -> tuple[RecoveryAction, ...]:
        return recovery_options_for(self.validation)

    def as_completed(self) -> CompletedPhase:
        return CompletedPhase(
            name=self.phase.name,
            mode=self.mode,
            output=self.output,
            validation=self.validation,
        )


class WorkflowStatus(str, Enum):
    """Final status of a workflow run."""

    COMPLETED = "COMPLETED"
    ABORTED = "ABORTED"
    FAILED = "FAILED"  # retries exhausted


@dataclass(frozen=True)
class WorkflowResult:
    """Result of a full run; history is kept intact on abort."""

    status: WorkflowStatus
    run_id: str
    phase_results: tuple[PhaseResult, ...] = ()
    mode_history: tuple[ModeDecision, ...] = ()
    failed_phase: str | None = None

    @property
    def completed_phases(self) -> tuple[str, ...]:
        return tuple(
            r.phase.name
            for r in self.phase_results
            if r.passed or r.validation_skipped
        )

    @property
    def validation_results(self) -> tuple[ValidationResult, ...]:
        return tuple(r.validation for r in self.phase_results)


# =============================================================================
# MIND ARTIFACTS AND SESSIONS
# =============================================================================


@dataclass(frozen=True)
class MindArtifactBundle:
    """Compiled heuristics plus axioma definitions, immutable after load."""

    heuristics: Mapping[HeuristicId, Heuristic]
    axiomas: AxiomaPolicy
    version: str = "1.0"
    source: str = "<memory>"
    fingerprint: str = ""
    loaded_at: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.heuristics, MappingProxyType):
            object.__setattr__(
                self, "heuristics", MappingProxyType(dict(self.heuristics))
            )

    def get_heuristic(self, heuristic_id: "str | HeuristicId") -> Heuristic:
        hid = HeuristicId.parse(heuristic_id)
        try:
            return self.heuristics[hid]
        except KeyError:
            raise UnknownHeuristicError(heuristic_id) from None


@dataclass(frozen=True)
class MindUnavailable:
    """Fail-closed load result; callers switch to Generic mode."""

    reason: str
    source: str = "<unknown>"
    detected_at: str = ""


MindState = MindArtifactBundle | MindUnavailable


@dataclass(frozen=True)
class Session:
    """Per-run handle; only the bundle is ever shared across sessions."""

    session_id: str
    mind: MindState
    created_at: str

    @property
    def mind_available(self) -> bool:
        return isinstance(self.mind, MindArtifactBundle)


def is_finite_score(value: Any) -> bool:
    """True for real numbers in [0, MAX_SCORE]; bools are rejected."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value) and 0.0 <= value <= MAX_SCORE
