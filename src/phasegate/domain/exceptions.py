"""
Domain exceptions for the phase-gated validation engine.

Domain rejections (vetoes, threshold failures) are not exceptions: they are
expressed as ValidationResult values. The exceptions below cover configuration
faults and misuse of the recovery protocol.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from phasegate.domain.models import ValidationResult, WorkflowResult


class PhaseGateError(Exception):
    """Base class for all phasegate errors."""


class UnknownHeuristicError(PhaseGateError, KeyError):
    """Raised when a heuristic identifier is not part of the registry."""

    def __init__(self, heuristic_id: Any):
        """
        Args:
            heuristic_id: The identifier that failed to resolve
        """
        super().__init__(f"Unknown heuristic: {heuristic_id!r}")
        self.heuristic_id = heuristic_id

    def __str__(self) -> str:
        return str(self.args[0])


class MindArtifactError(PhaseGateError):
    """
    Raised when a mind document is absent or malformed.

    The mind store catches this at its boundary and degrades to an
    unavailable state; it never escapes ``MindArtifactStore.load()``.
    """

    def __init__(self, message: str, source: str = "<unknown>"):
        super().__init__(message)
        self.source = source


class ConfigurationError(PhaseGateError):
    """Raised when engine or workflow configuration is invalid."""

    def __init__(self, message: str, errors: tuple[str, ...] = ()):
        """
        Args:
            message: Human-readable summary
            errors: Individual validation problems, one per entry
        """
        super().__init__(message)
        self.errors = errors


class InvalidRecoveryError(PhaseGateError):
    """
    Raised when a recovery action is not permitted for a gate outcome.

    Skipping validation is never allowed once a veto has fired. When raised
    from a workflow run, ``partial`` holds the aborted run with every result
    computed before the refusal.
    """

    def __init__(
        self,
        message: str,
        result: "ValidationResult",
        partial: "WorkflowResult | None" = None,
    ):
        super().__init__(message)
        self.result = result
        self.partial = partial
