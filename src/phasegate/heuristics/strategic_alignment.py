"""
Strategic alignment heuristic (PV_BS_001).

Scores how clearly a proposal states its end state and how well it aligns
with the stated vision. Missing success criteria switch the score to a
penalised mean of the two signals.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from phasegate.domain.models import (
    DEFAULT_THRESHOLD,
    CriterionResult,
    HeuristicOutcome,
    Recommendation,
    RecommendationBands,
)

from .base import (
    clamp_score,
    conservative_failure,
    read_flag,
    read_unit,
    weight_errors,
)

NAME = "strategic-alignment"

BANDS = RecommendationBands(
    passing=Recommendation.APPROVE,
    marginal=Recommendation.REFINE,
    failing=Recommendation.DEFER,
)


@dataclass(frozen=True)
class StrategicAlignmentParams:
    """Weights and penalties for PV_BS_001."""

    clarity_weight: float = 0.3
    vision_weight: float = 0.7
    threshold: float | None = None  # None defers to the checkpoint or engine
    criterion_floor: float = 0.70
    low_alignment_penalty: float = 0.90  # mean below criterion_floor
    missing_criteria_penalty: float = 0.82

    @property
    def pass_bar(self) -> float:
        return self.threshold if self.threshold is not None else DEFAULT_THRESHOLD

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StrategicAlignmentParams":
        defaults = cls()
        weights = data.get("weights", {})
        penalties = data.get("penalties", {})
        return cls(
            clarity_weight=weights.get("end_state_clarity", defaults.clarity_weight),
            vision_weight=weights.get("vision_alignment", defaults.vision_weight),
            threshold=data.get("threshold", defaults.threshold),
            criterion_floor=data.get("criterion_floor", defaults.criterion_floor),
            low_alignment_penalty=penalties.get(
                "low_alignment", defaults.low_alignment_penalty
            ),
            missing_criteria_penalty=penalties.get(
                "missing_success_criteria", defaults.missing_criteria_penalty
            ),
        )

    @staticmethod
    def check(data: Mapping[str, Any]) -> list[str]:
        """Semantic checks on the raw mind-document section."""
        if "weights" not in data:
            return []
        return weight_errors("PV_BS_001.weights", data["weights"])


@dataclass(frozen=True)
class StrategicAlignmentContext:
    """Fields read from the phase output."""

    end_state_clarity: float | None
    vision_alignment: float | None
    success_criteria_defined: bool | None = None

    @classmethod
    def from_mapping(cls, context: Mapping[str, Any]) -> "StrategicAlignmentContext":
        return cls(
            end_state_clarity=read_unit(context, "endStateClarity"),
            vision_alignment=read_unit(context, "visionAlignment"),
            success_criteria_defined=read_flag(context, "successCriteriaDefined"),
        )

    @property
    def missing(self) -> list[str]:
        missing = []
        if self.end_state_clarity is None:
            missing.append("endStateClarity")
        if self.vision_alignment is None:
            missing.append("visionAlignment")
        return missing


def evaluate(
    params: StrategicAlignmentParams, context: Mapping[str, Any]
) -> HeuristicOutcome:
    ctx = StrategicAlignmentContext.from_mapping(context)
    if ctx.end_state_clarity is None or ctx.vision_alignment is None:
        return conservative_failure(NAME, BANDS.failing, ctx.missing)

    clarity = ctx.end_state_clarity
    vision = ctx.vision_alignment

    floor = params.criterion_floor
    criteria = [
        CriterionResult(
            criterion="End-state clarity",
            passed=clarity >= floor,
            actual=clarity,
            expected=f">= {floor:.2f}",
        ),
        CriterionResult(
            criterion="Vision alignment",
            passed=vision >= floor,
            actual=vision,
            expected=f">= {floor:.2f}",
        ),
    ]

    if ctx.success_criteria_defined is False:
        mean = (clarity + vision) / 2
        penalty = (
            params.low_alignment_penalty
            if mean < floor
            else params.missing_criteria_penalty
        )
        score = mean * 10 * penalty
        formula = "penalised_mean"
        criteria.append(
            CriterionResult(
                criterion="Success criteria defined",
                passed=False,
                actual=False,
                expected=True,
                message="Define measurable success criteria for the end state",
            )
        )
    else:
        score = (clarity * params.clarity_weight + vision * params.vision_weight) * 10
        penalty = 1.0
        formula = "weighted"

    score = clamp_score(score)
    return HeuristicOutcome(
        score=score,
        recommendation=BANDS.classify(score, params.pass_bar),
        criteria=tuple(criteria),
        details={"formula": formula, "penalty": penalty},
    )
