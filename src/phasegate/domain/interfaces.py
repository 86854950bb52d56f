"""
Domain interfaces (Ports) for the phase-gated validation engine.

These abstract base classes define the contracts that implementations must
satisfy. They have no external dependencies and mark the boundaries between
the engine and its collaborators: mind storage, validators, metrics, phase
execution, recovery decisions and run tracing.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from phasegate.domain.models import (
        AgentContext,
        PhaseResult,
        RecoveryAction,
        ValidationResult,
    )
    from phasegate.domain.run_event import RunEvent, RunEventType


@dataclass(frozen=True)
class MindSourceSnapshot:
    """Raw mind document as read from a source."""

    data: Mapping[str, Any]
    fingerprint: str
    location: str


class MindSourceInterface(ABC):
    """
    Port for durable mind-artifact storage.

    ``read()`` is the only asynchronous boundary in the engine. It raises
    MindArtifactError when the document is absent or unreadable.
    """

    @abstractmethod
    async def read(self) -> MindSourceSnapshot:
        """Read and parse the mind document."""
        pass

    @abstractmethod
    async def fingerprint(self) -> str:
        """Cheap change marker; differs whenever the document changed."""
        pass


class ValidatorInterface(ABC):
    """Port for named, non-heuristic validators."""

    @abstractmethod
    def validate(
        self, artifact: Mapping[str, Any], threshold: float | None = None
    ) -> "ValidationResult":
        """
        Score an artifact.

        Args:
            artifact: Validator-specific key-value map
            threshold: Optional pass bar overriding the validator default

        Returns:
            ValidationResult without rendered guidance
        """
        pass


class MetricsInterface(ABC):
    """
    Port for the metrics hooks the engine calls.

    Aggregation belongs to the implementation; the engine only reports.
    """

    @abstractmethod
    def start_timer(
        self, timer_id: str, kind: str, tags: Mapping[str, Any] | None = None
    ) -> None:
        pass

    @abstractmethod
    def end_timer(
        self, timer_id: str, tags: Mapping[str, Any] | None = None
    ) -> float:
        """Stop a timer and return the elapsed milliseconds (0 if unknown)."""
        pass

    @abstractmethod
    def record_cache_hit(self, tags: Mapping[str, Any] | None = None) -> None:
        pass

    @abstractmethod
    def record_cache_miss(self, tags: Mapping[str, Any] | None = None) -> None:
        pass

    @abstractmethod
    def record_fallback(
        self, reason: str, tags: Mapping[str, Any] | None = None
    ) -> None:
        pass


class NullMetrics(MetricsInterface):
    """No-op metrics sink used when the caller supplies none."""

    def start_timer(
        self, timer_id: str, kind: str, tags: Mapping[str, Any] | None = None
    ) -> None:
        return None

    def end_timer(
        self, timer_id: str, tags: Mapping[str, Any] | None = None
    ) -> float:
        return 0.0

    def record_cache_hit(self, tags: Mapping[str, Any] | None = None) -> None:
        return None

    def record_cache_miss(self, tags: Mapping[str, Any] | None = None) -> None:
        return None

    def record_fallback(
        self, reason: str, tags: Mapping[str, Any] | None = None
    ) -> None:
        return None


class PhaseExecutorInterface(ABC):
    """
    Port for the work done inside a phase.

    Implementations are agents, scripts or humans. Whatever they return is
    the phase output: it becomes the gate context and is made available,
    read-only, to every later phase.
    """

    @abstractmethod
    def execute(self, context: "AgentContext") -> Mapping[str, Any]:
        """
        Produce the phase output.

        Args:
            context: Phase descriptor, mode, next checkpoint, prior outputs and,
                on a retry, the failed ValidationResult

        Returns:
            Output mapping for this phase
        """
        pass


class RecoveryPolicyInterface(ABC):
    """Port for the caller's decision after a failed gate."""

    @abstractmethod
    def choose(self, result: "PhaseResult") -> "RecoveryAction":
        """Pick one of ``result.recovery_options``."""
        pass


class RunEventStoreInterface(ABC):
    """Port for run trace storage."""

    @abstractmethod
    def store_event(self, event: "RunEvent") -> str:
        """Store an event and return its id."""
        pass

    @abstractmethod
    def get_events(
        self,
        run_id: str,
        event_type: "RunEventType | None" = None,
        phase: str | None = None,
    ) -> list["RunEvent"]:
        """Events for one run in creation order, optionally filtered."""
        pass
