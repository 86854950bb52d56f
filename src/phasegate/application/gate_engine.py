"""
ValidationGateEngine: executes one checkpoint.

A checkpoint moves PENDING -> PASSED | FAILED | VETOED in a single call.
There is no internal retry; the orchestrator re-invokes the gate with an
updated context when the caller chooses fix-and-retry.

Order of decisions:
1. ``validation: 'none'`` short-circuits to a skipped, passing result.
2. The evaluator is resolved (heuristic or named validator). A checkpoint
   naming neither, or an unregistered id, is a configuration error.
3. A veto overrides everything: score 0, terminal recommendation.
4. Otherwise the score is compared with the checkpoint threshold.
5. Feedback is rendered from the final result.
"""

import logging
import uuid
from collections.abc import Callable, Mapping
from dataclasses import replace
from typing import Any

from phasegate.domain.exceptions import UnknownHeuristicError
from phasegate.domain.interfaces import (
    MetricsInterface,
    NullMetrics,
    ValidatorInterface,
)
from phasegate.domain.models import (
    DEFAULT_SCORE_EPSILON,
    DEFAULT_THRESHOLD,
    CheckpointConfig,
    CriterionResult,
    Heuristic,
    HeuristicOutcome,
    MindArtifactBundle,
    Phase,
    Recommendation,
    Severity,
    ValidationResult,
    is_finite_score,
    meets_threshold,
)
from phasegate.validators import build_validators

from .feedback import render_feedback

logger = logging.getLogger(__name__)

HeuristicResolver = Callable[[str], Heuristic]


class ValidationGateEngine:
    """
    Runs checkpoints against phase outputs.

    Args:
        resolve_heuristic: Maps a heuristic id to a compiled heuristic; None
            when no mind is loaded
        validators: Named validators available to checkpoints
        threshold: Default pass bar when a checkpoint sets none
        epsilon: Floating-point allowance at the threshold
        metrics: Timing hooks
    """

    def __init__(
        self,
        resolve_heuristic: HeuristicResolver | None,
        validators: Mapping[str, ValidatorInterface],
        threshold: float = DEFAULT_THRESHOLD,
        epsilon: float = DEFAULT_SCORE_EPSILON,
        metrics: MetricsInterface | None = None,
    ) -> None:
        self._resolve = resolve_heuristic
        self._validators = dict(validators)
        self.threshold = threshold
        self.epsilon = epsilon
        self._metrics = metrics or NullMetrics()

    @classmethod
    def for_bundle(
        cls,
        bundle: MindArtifactBundle | None,
        threshold: float = DEFAULT_THRESHOLD,
        epsilon: float = DEFAULT_SCORE_EPSILON,
        metrics: MetricsInterface | None = None,
    ) -> "ValidationGateEngine":
        """Engine backed by a mind bundle, or structural-only when None."""
        return cls(
            resolve_heuristic=bundle.get_heuristic if bundle else None,
            validators=build_validators(
                bundle.axiomas if bundle else None, threshold, epsilon
            ),
            threshold=threshold,
            epsilon=epsilon,
            metrics=metrics,
        )

    def execute_gate(self, phase: Phase, context: Mapping[str, Any]) -> ValidationResult:
        """
        Run the phase's checkpoint against ``context``.

        Args:
            phase: Phase descriptor; its ``validation`` selects the evaluator
            context: Phase output handed to the evaluator

        Returns:
            Final ValidationResult with rendered feedback
        """
        checkpoint = phase.checkpoint
        if checkpoint is None:
            logger.debug("Phase %s has no validation; skipping", phase.name)
            return ValidationResult.skipped_result(phase.name)

        gate = checkpoint.checkpoint
        threshold = (
            checkpoint.threshold if checkpoint.threshold is not None else self.threshold
        )
        timer_id = f"validation:{gate}:{uuid.uuid4()}"
        self._metrics.start_timer(timer_id, "validation", {"gate": gate})
        try:
            if checkpoint.heuristic:
                result = self._run_heuristic(
                    checkpoint, checkpoint.heuristic, context, threshold
                )
            elif checkpoint.validator:
                result = self._run_validator(checkpoint, context, threshold)
            else:
                result = ValidationResult.configuration_error(
                    gate,
                    f"Checkpoint '{gate}' configures neither heuristic nor validator",
                )
        finally:
            self._metrics.end_timer(timer_id, {"gate": gate})

        if result.error:
            logger.error("Checkpoint %s: %s", gate, result.message)
            return result

        rendered = render_feedback(result, checkpoint)
        result = result.with_feedback(rendered, *result.feedback)
        logger.info(
            "Checkpoint %s: passed=%s score=%.2f veto=%s recommendation=%s",
            gate,
            result.passed,
            result.score,
            result.veto,
            result.recommendation.value if result.recommendation else None,
        )
        return result

    # ------------------------------------------------------------------ #
    # Evaluators
    # ------------------------------------------------------------------ #

    def _run_heuristic(
        self,
        checkpoint: CheckpointConfig,
        heuristic_id: str,
        context: Mapping[str, Any],
        threshold: float,
    ) -> ValidationResult:
        gate = checkpoint.checkpoint
        if self._resolve is None:
            return ValidationResult.configuration_error(
                gate,
                f"Checkpoint '{gate}' needs heuristic '{heuristic_id}' "
                "but no mind artifacts are loaded",
            )
        try:
            heuristic = self._resolve(heuristic_id)
        except UnknownHeuristicError:
            return ValidationResult.configuration_error(
                gate,
                f"Checkpoint '{gate}' names unregistered heuristic '{heuristic_id}'",
            )
        if checkpoint.threshold is None and heuristic.threshold is not None:
            threshold = heuristic.threshold

        timer_id = f"heuristic:{heuristic_id}:{uuid.uuid4()}"
        self._metrics.start_timer(
            timer_id, "heuristic_exec", {"heuristic": heuristic_id}
        )
        try:
            outcome = heuristic.evaluate(context)
        except Exception as e:
            logger.exception(
                "Heuristic %s raised on checkpoint %s", heuristic_id, gate
            )
            return self._malformed(gate, f"heuristic '{heuristic_id}' raised {e!r}")
        finally:
            self._metrics.end_timer(timer_id, {"heuristic": heuristic_id})

        problem = _outcome_problem(outcome)
        if problem:
            return self._malformed(gate, f"heuristic '{heuristic_id}' {problem}")

        if outcome.veto_triggered:
            return ValidationResult(
                gate=gate,
                passed=False,
                score=0.0,
                veto=True,
                veto_reason=outcome.veto_reason or "VETO_TRIGGERED",
                recommendation=outcome.recommendation,
                vetoes=outcome.vetoes,
                criteria=outcome.criteria,
                severity=Severity.CRITICAL,
                threshold=threshold,
                details={"heuristic": heuristic.heuristic_id.value},
            )

        passed = not outcome.missing_fields and meets_threshold(
            outcome.score, threshold, self.epsilon
        )
        score_criterion = CriterionResult(
            criterion="Overall score",
            passed=passed,
            actual=round(outcome.score, 2),
            expected=f">= {threshold:.1f}",
        )
        recommendation = (
            heuristic.bands.failing
            if outcome.missing_fields
            else heuristic.bands.classify(outcome.score, threshold, self.epsilon)
        )
        return ValidationResult(
            gate=gate,
            passed=passed,
            score=round(outcome.score, 2),
            recommendation=recommendation,
            criteria=(*outcome.criteria, score_criterion),
            missing_fields=outcome.missing_fields,
            severity=Severity.INFO if passed else Severity.WARNING,
            threshold=threshold,
            details={"heuristic": heuristic.heuristic_id.value, **outcome.details},
        )

    def _run_validator(
        self,
        checkpoint: CheckpointConfig,
        context: Mapping[str, Any],
        threshold: float,
    ) -> ValidationResult:
        gate = checkpoint.checkpoint
        name = checkpoint.validator
        validator = self._validators.get(name or "")
        if validator is None:
            return ValidationResult.configuration_error(
                gate, f"Checkpoint '{gate}' names unregistered validator '{name}'"
            )
        try:
            result = validator.validate(context, threshold=threshold)
        except Exception as e:
            logger.exception("Validator %s raised on checkpoint %s", name, gate)
            return self._malformed(gate, f"validator '{name}' raised {e!r}")
        if not isinstance(result, ValidationResult):
            return self._malformed(
                gate, f"validator '{name}' returned {type(result).__name__}"
            )
        if not is_finite_score(result.score):
            return self._malformed(gate, f"validator '{name}' scored {result.score!r}")

        severity = Severity.CRITICAL if result.veto else result.severity
        return replace(
            result,
            gate=gate,
            severity=severity,
            details={"validator": name, **result.details},
        )

    def _malformed(self, gate: str, problem: str) -> ValidationResult:
        logger.warning(
            "evaluator_output_malformed",
            extra={
                "event": "evaluator_output_malformed",
                "metadata": {"gate": gate, "problem": problem},
            },
        )
        return ValidationResult(
            gate=gate,
            passed=False,
            error=True,
            severity=Severity.ERROR,
            recommendation=Recommendation.DEFER,
            message=f"Malformed evaluator output on checkpoint '{gate}': {problem}",
            feedback=(f"Malformed evaluator output: {problem}",),
        )


def _outcome_problem(outcome: Any) -> str | None:
    """Describe what is wrong with an evaluator outcome, or None if sound."""
    if not isinstance(outcome, HeuristicOutcome):
        return f"returned {type(outcome).__name__} instead of HeuristicOutcome"
    if not is_finite_score(outcome.score):
        return f"scored {outcome.score!r} (expected 0-10)"
    if not isinstance(outcome.recommendation, Recommendation):
        return f"recommended {outcome.recommendation!r}"
    return None
