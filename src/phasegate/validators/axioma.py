"""
Axioma quality validator.

Scores an artifact against a fixed set of weighted quality dimensions,
independently of the phase heuristics. One badly broken dimension drags the
whole score down through a multiplicative penalty even though no single
dimension can veto.
"""

import logging
from collections.abc import Mapping
from typing import Any

from phasegate.domain.interfaces import ValidatorInterface
from phasegate.domain.models import (
    DEFAULT_SCORE_EPSILON,
    DEFAULT_THRESHOLD,
    AxiomaDimension,
    AxiomaPolicy,
    CriterionResult,
    Recommendation,
    RecommendationBands,
    Severity,
    ValidationResult,
    meets_threshold,
)
from phasegate.heuristics.base import read_unit

logger = logging.getLogger(__name__)

VALIDATOR_NAME = "axioma-validator"

DEFAULT_DIMENSIONS = (
    AxiomaDimension("completeness", 0.30),
    AxiomaDimension("actionOrientation", 0.35),
    AxiomaDimension("progressIndicators", 0.10),
    AxiomaDimension("riskMitigation", 0.25),
)
DEFAULT_POLICY = AxiomaPolicy(dimensions=DEFAULT_DIMENSIONS)

BANDS = RecommendationBands(
    passing=Recommendation.APPROVE,
    marginal=Recommendation.REFINE,
    failing=Recommendation.DEFER,
)


class AxiomaValidator(ValidatorInterface):
    """
    Weighted multi-dimension quality score with a critical-deficiency penalty.

    Dimension values are read from the artifact itself or from its ``axioma``
    key. Every dimension of the policy must be present; a partial set is a
    conservative failure listing what is missing.
    """

    name = VALIDATOR_NAME

    def __init__(
        self,
        policy: AxiomaPolicy = DEFAULT_POLICY,
        threshold: float = DEFAULT_THRESHOLD,
        epsilon: float = DEFAULT_SCORE_EPSILON,
    ) -> None:
        self.policy = policy
        self.threshold = threshold
        self.epsilon = epsilon

    def score(self, values: Mapping[str, float]) -> tuple[float, float, bool]:
        """
        Compute (score, unpenalised weighted score, penalty applied).

        Args:
            values: A value in [0, 1] for every dimension of the policy
        """
        weighted = (
            sum(values[d.name] * d.weight for d in self.policy.dimensions) * 10
        )
        critical = any(
            values[d.name] < self.policy.critical_floor for d in self.policy.dimensions
        )
        score = weighted * self.policy.critical_penalty if critical else weighted
        return score, weighted, critical

    def validate(
        self, artifact: Mapping[str, Any], threshold: float | None = None
    ) -> ValidationResult:
        threshold = self.threshold if threshold is None else threshold
        nested = artifact.get("axioma")
        source = nested if isinstance(nested, Mapping) else artifact

        values: dict[str, float] = {}
        missing: list[str] = []
        for dim in self.policy.dimensions:
            value = read_unit(source, dim.name)
            if value is None:
                missing.append(dim.name)
            else:
                values[dim.name] = value

        if missing:
            logger.info("Axioma artifact missing dimensions: %s", ", ".join(missing))
            return ValidationResult(
                gate=self.name,
                passed=False,
                score=0.0,
                recommendation=BANDS.failing,
                missing_fields=tuple(missing),
                severity=Severity.WARNING,
                threshold=threshold,
                feedback=(f"Missing axioma dimension(s): {', '.join(missing)}",),
                criteria=tuple(
                    CriterionResult(
                        criterion=name,
                        passed=False,
                        actual=None,
                        expected="number in [0, 1]",
                    )
                    for name in missing
                ),
            )

        score, weighted, penalised = self.score(values)
        floor = self.policy.violation_floor
        below = [d.name for d in self.policy.dimensions if values[d.name] < floor]
        count = len(below)
        limit = self.policy.violation_display_limit
        passed = meets_threshold(score, threshold, self.epsilon)

        feedback = []
        if not passed:
            feedback.append(
                f"Quality score {score:.1f} below threshold {threshold:.1f}"
            )
        if count:
            feedback.append(f"{count} dimension(s) below {floor:.2f} threshold")
        if penalised:
            feedback.append(
                "Critical deficiency detected "
                f"(dimension < {self.policy.critical_floor:.2f})"
            )

        return ValidationResult(
            gate=self.name,
            passed=passed,
            score=round(score, 2),
            recommendation=BANDS.classify(score, threshold, self.epsilon),
            violations=tuple(f"{name}: {values[name]:.2f}" for name in below),
            violations_count=f">{limit}" if count > limit else count,
            criteria=tuple(
                CriterionResult(
                    criterion=d.name,
                    passed=values[d.name] >= floor,
                    actual=values[d.name],
                    expected=f">= {floor:.2f}",
                )
                for d in self.policy.dimensions
            ),
            severity=Severity.INFO if passed else Severity.WARNING,
            threshold=threshold,
            feedback=tuple(feedback),
            details={
                "weighted_score": round(weighted, 4),
                "penalty_applied": penalised,
                "dimensions": values,
            },
        )
