"""Tests for run event storage and emission."""

from phasegate.application.run_event_emitter import RunEventEmitter
from phasegate.domain.models import RecoveryAction, ValidationResult, WorkflowMode
from phasegate.domain.run_event import RunEvent, RunEventType
from phasegate.infrastructure.persistence.run_events import InMemoryRunEventStore


def make_event(
    run_id: str = "run-1",
    event_type: RunEventType = RunEventType.PHASE_START,
    phase: str = "discovery",
    event_id: str = "evt-1",
) -> RunEvent:
    """Create a test run event."""
    return RunEvent(event_id=event_id, event_type=event_type, run_id=run_id, phase=phase)


class TestInMemoryRunEventStore:
    """Tests for InMemoryRunEventStore."""

    def test_store_and_retrieve_event(self):
        store = InMemoryRunEventStore()
        event = make_event()

        assert store.store_event(event) == "evt-1"
        assert store.get_events("run-1") == [event]

    def test_filters(self):
        store = InMemoryRunEventStore()
        store.store_event(make_event(run_id="run-2"))
        store.store_event(make_event(event_type=RunEventType.GATE_PASS))
        store.store_event(make_event(phase="qa"))

        assert len(store.get_events("run-1")) == 2
        assert len(store.get_events("run-1", event_type=RunEventType.GATE_PASS)) == 1
        assert len(store.get_events("run-1", phase="qa")) == 1

    def test_insertion_order(self):
        store = InMemoryRunEventStore()
        for i in range(3):
            store.store_event(make_event(event_id=f"evt-{i}"))
        assert [e.event_id for e in store.get_events("run-1")] == ["evt-0", "evt-1", "evt-2"]

    def test_clear(self):
        store = InMemoryRunEventStore()
        store.store_event(make_event())
        store.clear()
        assert store.get_events("run-1") == []


class TestRunEventEmitter:
    """Tests for RunEventEmitter."""

    def test_gate_verdicts(self):
        store = InMemoryRunEventStore()
        emitter = RunEventEmitter(store, "run-1")

        emitter.gate_result("a", ValidationResult(gate="g", passed=True, score=8.0), 1)
        emitter.gate_result("b", ValidationResult(gate="g", passed=False), 1)
        emitter.gate_result(
            "c", ValidationResult(gate="g", passed=False, veto=True, veto_reason="X"), 2
        )
        emitter.gate_result("d", ValidationResult.skipped_result("d"), 1)

        events = store.get_events("run-1")
        assert [e.verdict for e in events] == ["PASS", "FAIL", "VETO", "SKIPPED"]
        assert events[0].score == 8.0
        assert events[2].summary == "X"
        assert events[2].attempt == 2

    def test_phase_start_and_recovery(self):
        store = InMemoryRunEventStore()
        emitter = RunEventEmitter(store, "run-1")

        emitter.phase_start("discovery", 1, WorkflowMode.PV)
        emitter.recovery("discovery", RecoveryAction.SKIP_VALIDATION, 1)

        start, recovery = store.get_events("run-1")
        assert start.mode == "PV"
        assert recovery.verdict == "SKIP VALIDATION"
        assert start.created_at

    def test_summary_truncated(self):
        store = InMemoryRunEventStore()
        emitter = RunEventEmitter(store, "run-1")

        emitter.gate_result(
            "a", ValidationResult(gate="g", passed=False, message="x" * 800), 1
        )

        assert len(store.get_events("run-1")[0].summary) == 500

    def test_no_store_is_noop(self):
        emitter = RunEventEmitter(None, "run-1")
        emitter.aborted("discovery", "aborted by caller")
