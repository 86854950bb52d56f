"""
WorkflowOrchestrator: sequences phases and gates them.

Phases run strictly one after another. Before each phase the orchestrator
re-reads the session's mind state and picks PV or Generic mode; a switch
mid-run never touches outputs of phases that already completed. The agent
context is the only channel through which a phase sees earlier phases.

A failed gate is never silently passed over. The caller's recovery policy
picks fix-and-retry, skip-validation or abort; skip is refused after a veto.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from phasegate.domain.config import EngineConfig, ModePreference
from phasegate.domain.exceptions import InvalidRecoveryError
from phasegate.domain.interfaces import (
    MetricsInterface,
    NullMetrics,
    PhaseExecutorInterface,
    RecoveryPolicyInterface,
    RunEventStoreInterface,
)
from phasegate.domain.models import (
    NO_VALIDATION,
    AgentContext,
    CompletedPhase,
    MindArtifactBundle,
    MindState,
    ModeDecision,
    Phase,
    PhaseResult,
    RecoveryAction,
    Session,
    ValidationResult,
    WorkflowDefinition,
    WorkflowMode,
    WorkflowResult,
    WorkflowStatus,
)
from phasegate.validators import AXIOMA_VALIDATORS, STRUCTURAL_VALIDATORS

from .gate_engine import ValidationGateEngine
from .run_event_emitter import RunEventEmitter
from .session import SessionManager

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class WorkflowOrchestrator:
    """
    Drives a workflow through its phases and checkpoints.

    Args:
        sessions: Session manager owning the mind store
        config: Engine settings (mode preference, thresholds, retries)
        metrics: Hooks for timing and fallbacks
        event_store: Optional run trace sink
        reload_on_change: Check the mind source for changes at each phase
            boundary and reload when it changed
    """

    def __init__(
        self,
        sessions: SessionManager,
        config: EngineConfig | None = None,
        metrics: MetricsInterface | None = None,
        event_store: RunEventStoreInterface | None = None,
        reload_on_change: bool = False,
    ) -> None:
        self._sessions = sessions
        self.config = config or EngineConfig()
        self._metrics = metrics or NullMetrics()
        self._event_store = event_store
        self._reload_on_change = reload_on_change
        self._engine_cache: tuple[MindState, ValidationGateEngine] | None = None

    # ------------------------------------------------------------------ #
    # Mode selection
    # ------------------------------------------------------------------ #

    def select_mode(self, mind_available: bool) -> WorkflowMode:
        """PV when the mind is loaded and at least one PV check is enabled."""
        if self.config.mode is ModePreference.GENERIC or not mind_available:
            return WorkflowMode.GENERIC
        if not (self.config.heuristics_enabled or self.config.axioma_enabled):
            return WorkflowMode.GENERIC
        return WorkflowMode.PV

    def _mode_reason(self, session: Session) -> str:
        if self.config.mode is ModePreference.GENERIC:
            return "Generic mode forced by configuration"
        if not session.mind_available:
            reason = getattr(session.mind, "reason", "unknown")
            return f"Mind artifacts unavailable: {reason}"
        if not (self.config.heuristics_enabled or self.config.axioma_enabled):
            return "Heuristic and axioma checks disabled"
        return "Mind artifacts available"

    def effective_phase(self, phase: Phase, mode: WorkflowMode) -> Phase:
        """
        The phase as it will be gated under ``mode``.

        Generic mode drops heuristic- and axioma-backed checkpoints; structural
        validators and misconfigured checkpoints are kept so that errors still
        surface. PV mode drops only the check families disabled in config.
        """
        cp = phase.checkpoint
        if cp is None or cp.validator in STRUCTURAL_VALIDATORS:
            return phase
        uses_heuristic = bool(cp.heuristic)
        uses_axioma = cp.validator in AXIOMA_VALIDATORS
        if mode is WorkflowMode.GENERIC and (uses_heuristic or uses_axioma):
            return replace(phase, validation=NO_VALIDATION)
        if uses_heuristic and not self.config.heuristics_enabled:
            return replace(phase, validation=NO_VALIDATION)
        if uses_axioma and not self.config.axioma_enabled:
            return replace(phase, validation=NO_VALIDATION)
        return phase

    # ------------------------------------------------------------------ #
    # Single phase
    # ------------------------------------------------------------------ #

    def build_agent_context(
        self,
        phase: Phase,
        mode: WorkflowMode,
        previous_phases: Sequence[CompletedPhase | PhaseResult] = (),
        last_result: ValidationResult | None = None,
    ) -> AgentContext:
        completed = tuple(
            p.as_completed() if isinstance(p, PhaseResult) else p
            for p in previous_phases
        )
        return AgentContext(
            phase=phase,
            mode=mode,
            next_checkpoint=self.effective_phase(phase, mode).checkpoint_name,
            previous_phases=completed,
            last_result=last_result,
        )

    def run_phase(
        self,
        phase: Phase,
        session: Session,
        previous_phases: Sequence[CompletedPhase | PhaseResult] = (),
        executor: PhaseExecutorInterface | None = None,
        *,
        output: Mapping[str, Any] | None = None,
        attempt: int = 1,
        last_result: ValidationResult | None = None,
    ) -> PhaseResult:
        """
        Execute one phase and gate its output.

        Args:
            phase: Phase to run
            session: Session supplying the mind state (and thus the mode)
            previous_phases: Completed phases visible to this one
            executor: Produces the output; when None, ``output`` is gated as is
            output: Precomputed phase output
            attempt: 1-based attempt number
            last_result: Failed result of the previous attempt, for retries
        """
        mode = self.select_mode(session.mind_available)
        active = self.effective_phase(phase, mode)
        context = self.build_agent_context(phase, mode, previous_phases, last_result)
        if executor is not None:
            output = executor.execute(context)
        output = output or {}

        result = self._engine_for(session.mind).execute_gate(active, output)
        return PhaseResult(
            phase=phase,
            mode=mode,
            output=output,
            validation=result,
            attempt=attempt,
        )

    def _engine_for(self, mind: MindState) -> ValidationGateEngine:
        if self._engine_cache is not None and self._engine_cache[0] is mind:
            return self._engine_cache[1]
        bundle = mind if isinstance(mind, MindArtifactBundle) else None
        engine = ValidationGateEngine.for_bundle(
            bundle,
            threshold=self.config.minimum_score,
            epsilon=self.config.score_epsilon,
            metrics=self._metrics,
        )
        self._engine_cache = (mind, engine)
        return engine

    # ------------------------------------------------------------------ #
    # Full run
    # ------------------------------------------------------------------ #

    async def run(
        self,
        workflow: WorkflowDefinition,
        executor: PhaseExecutorInterface,
        recovery: RecoveryPolicyInterface | None = None,
        run_id: str | None = None,
    ) -> WorkflowResult:
        """
        Run every phase in order.

        Without a recovery policy the first failed gate aborts the run. The
        session is closed however the run ends, and every ValidationResult
        computed so far is returned.

        Raises:
            InvalidRecoveryError: If the policy picks an option that is not
                offered (skipping after a veto). The run stops as ABORTED
                and the error's ``partial`` carries its results.
        """
        session = await self._sessions.open_session(run_id)
        emitter = RunEventEmitter(self._event_store, session.session_id)
        results: list[PhaseResult] = []
        completed: list[CompletedPhase] = []
        history: list[ModeDecision] = []
        status = WorkflowStatus.COMPLETED
        failed_phase: str | None = None
        refused: InvalidRecoveryError | None = None

        try:
            for phase in workflow.phases:
                if self._reload_on_change:
                    await self._sessions.store.reload_if_changed()
                session = await self._sessions.refresh_session(session.session_id)
                mode = self._record_mode(session, history, emitter, phase.name)

                attempt = 1
                last_result: ValidationResult | None = None
                while True:
                    emitter.phase_start(phase.name, attempt, mode)
                    result = self.run_phase(
                        phase,
                        session,
                        completed,
                        executor,
                        attempt=attempt,
                        last_result=last_result,
                    )
                    results.append(result)
                    emitter.gate_result(phase.name, result.validation, attempt)
                    if result.passed:
                        completed.append(result.as_completed())
                        break

                    action = RecoveryAction.ABORT_WORKFLOW
                    if recovery is not None:
                        action = recovery.choose(result)
                    if action not in result.recovery_options:
                        refused = InvalidRecoveryError(
                            f"{action.value} is not allowed after a "
                            f"{result.gate_state.value} gate on phase {phase.name}",
                            result.validation,
                        )
                        logger.error("Recovery refused on phase %s: %s", phase.name, refused)
                        status = WorkflowStatus.ABORTED
                        failed_phase = phase.name
                        emitter.aborted(phase.name, str(refused))
                        break
                    emitter.recovery(phase.name, action, attempt)

                    if action is RecoveryAction.FIX_AND_RETRY:
                        if attempt > self.config.max_retries:
                            logger.error(
                                "Phase %s failed after %d attempts",
                                phase.name,
                                attempt,
                            )
                            status = WorkflowStatus.FAILED
                            failed_phase = phase.name
                            emitter.aborted(phase.name, "retries exhausted")
                            break
                        attempt += 1
                        last_result = result.validation
                        continue

                    if action is RecoveryAction.SKIP_VALIDATION:
                        logger.warning(
                            "Validation of phase %s skipped by caller "
                            "(checkpoint %s, score %.2f)",
                            phase.name,
                            result.validation.gate,
                            result.validation.score,
                        )
                        skipped = replace(result, validation_skipped=True)
                        results[-1] = skipped
                        completed.append(skipped.as_completed())
                        break

                    logger.info("Workflow aborted at phase %s", phase.name)
                    status = WorkflowStatus.ABORTED
                    failed_phase = phase.name
                    emitter.aborted(phase.name, "aborted by caller")
                    break

                if status is not WorkflowStatus.COMPLETED:
                    break
        finally:
            self._sessions.close_session(session.session_id)

        outcome = WorkflowResult(
            status=status,
            run_id=session.session_id,
            phase_results=tuple(results),
            mode_history=tuple(history),
            failed_phase=failed_phase,
        )
        if refused is not None:
            refused.partial = outcome
            raise refused
        return outcome

    def _record_mode(
        self,
        session: Session,
        history: list[ModeDecision],
        emitter: RunEventEmitter,
        phase_name: str,
    ) -> WorkflowMode:
        mode = self.select_mode(session.mind_available)
        if history and history[-1].mode is mode:
            return mode

        reason = self._mode_reason(session)
        history.append(ModeDecision(mode=mode, reason=reason, timestamp=_now()))
        if mode is WorkflowMode.GENERIC and not session.mind_available:
            self._metrics.record_fallback("generic_mode", {"phase": phase_name})
        if len(history) > 1:
            logger.warning(
                "Switched to %s mode before phase %s: %s", mode.value, phase_name, reason
            )
            emitter.mode_switch(phase_name, mode, reason)
        else:
            logger.info("Running in %s mode: %s", mode.value, reason)
        return mode
