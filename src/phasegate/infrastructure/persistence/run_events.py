"""Run event store implementation (in-process only)."""

from phasegate.domain.interfaces import RunEventStoreInterface
from phasegate.domain.run_event import RunEvent, RunEventType


class InMemoryRunEventStore(RunEventStoreInterface):
    """Keeps run events for the lifetime of the process."""

    def __init__(self) -> None:
        self._events: list[RunEvent] = []

    def store_event(self, event: RunEvent) -> str:
        self._events.append(event)
        return event.event_id

    def get_events(
        self,
        run_id: str,
        event_type: RunEventType | None = None,
        phase: str | None = None,
    ) -> list[RunEvent]:
        # insertion order is creation order; timestamps can tie
        return [
            e
            for e in self._events
            if e.run_id == run_id
            and (event_type is None or e.event_type == event_type)
            and (phase is None or e.phase == phase)
        ]

    def clear(self) -> None:
        self._events.clear()
