"""Run trace emission service."""

import uuid
from datetime import datetime, timezone

from phasegate.domain.interfaces import RunEventStoreInterface
from phasegate.domain.models import (
    RecoveryAction,
    ValidationResult,
    WorkflowMode,
)
from phasegate.domain.run_event import RunEvent, RunEventType


class RunEventEmitter:
    """Emits run events to a store.

    Handles ID generation and timestamps. With no store configured every
    call is a no-op, so the orchestrator never has to branch on tracing.
    """

    def __init__(self, event_store: RunEventStoreInterface | None, run_id: str) -> None:
        self._store = event_store
        self._run_id = run_id

    def _emit(self, event_type: RunEventType, phase: str, **fields: object) -> None:
        if self._store is None:
            return
        self._store.store_event(
            RunEvent(
                event_id=str(uuid.uuid4()),
                event_type=event_type,
                run_id=self._run_id,
                phase=phase,
                created_at=datetime.now(timezone.utc).isoformat(),
                **fields,  # type: ignore[arg-type]
            )
        )

    def phase_start(self, phase: str, attempt: int, mode: WorkflowMode) -> None:
        self._emit(RunEventType.PHASE_START, phase, attempt=attempt, mode=mode.value)

    def gate_result(self, phase: str, result: ValidationResult, attempt: int) -> None:
        """Emit GATE_SKIPPED, GATE_VETO, GATE_PASS or GATE_FAIL for a result."""
        if result.skipped:
            event_type, verdict = RunEventType.GATE_SKIPPED, "SKIPPED"
        elif result.veto:
            event_type, verdict = RunEventType.GATE_VETO, "VETO"
        elif result.passed:
            event_type, verdict = RunEventType.GATE_PASS, "PASS"
        else:
            event_type, verdict = RunEventType.GATE_FAIL, "FAIL"
        summary = result.veto_reason or result.message or ""
        self._emit(
            event_type,
            phase,
            checkpoint=result.gate,
            verdict=verdict,
            attempt=attempt,
            score=result.score,
            summary=summary[:500],
        )

    def mode_switch(self, phase: str, mode: WorkflowMode, reason: str) -> None:
        self._emit(RunEventType.MODE_SWITCH, phase, mode=mode.value, summary=reason)

    def recovery(self, phase: str, action: RecoveryAction, attempt: int) -> None:
        self._emit(
            RunEventType.RECOVERY, phase, verdict=action.value, attempt=attempt
        )

    def aborted(self, phase: str, summary: str) -> None:
        self._emit(RunEventType.WORKFLOW_ABORTED, phase, summary=summary)
