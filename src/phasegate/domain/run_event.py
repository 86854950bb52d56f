"""Run trace models: one event per state transition of a workflow run."""

from dataclasses import dataclass
from enum import Enum


class RunEventType(str, Enum):
    """Types of run trace events."""

    PHASE_START = "PHASE_START"
    GATE_PASS = "GATE_PASS"
    GATE_FAIL = "GATE_FAIL"
    GATE_VETO = "GATE_VETO"
    GATE_SKIPPED = "GATE_SKIPPED"
    MODE_SWITCH = "MODE_SWITCH"
    RECOVERY = "RECOVERY"
    WORKFLOW_ABORTED = "WORKFLOW_ABORTED"


@dataclass(frozen=True)
class RunEvent:
    """
    Single workflow run transition.

    Captures enough to reconstruct what each gate decided and why a run
    changed mode or stopped, without holding the outputs themselves.
    """

    event_id: str
    event_type: RunEventType
    run_id: str
    phase: str
    checkpoint: str | None = None
    verdict: str | None = None  # "PASS", "FAIL", "VETO", "SKIPPED"
    attempt: int | None = None
    mode: str | None = None
    score: float | None = None
    summary: str = ""
    created_at: str = ""  # ISO 8601
