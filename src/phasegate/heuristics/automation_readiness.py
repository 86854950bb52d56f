"""
Automation readiness heuristic (PV_PM_001).

Decides whether a recurring task is ready to be automated. High-risk work
without guardrails is vetoed outright; otherwise readiness is scored and
guardrails earn a small bonus. The tipping point (how often the task recurs)
is reported alongside the score.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from phasegate.domain.models import (
    DEFAULT_THRESHOLD,
    CriterionResult,
    HeuristicOutcome,
    Recommendation,
    RecommendationBands,
    VetoDetail,
)

from .base import clamp_score, conservative_failure, read_unit

NAME = "automation-readiness"
VETO_REASON = "HIGH_RISK_WITHOUT_GUARDRAILS"
RISK_LEVELS = ("low", "medium", "high")

BANDS = RecommendationBands(
    passing=Recommendation.APPROVE,
    marginal=Recommendation.IMPROVE_READINESS,
    failing=Recommendation.IMPROVE_READINESS,
)


@dataclass(frozen=True)
class AutomationReadinessParams:
    """Bonus and tipping-point settings for PV_PM_001."""

    threshold: float | None = None  # None defers to the checkpoint or engine
    guardrail_bonus: float = 0.5
    high_risk_min_guardrails: int = 3
    tipping_point_per_month: float = 2.0

    @property
    def pass_bar(self) -> float:
        return self.threshold if self.threshold is not None else DEFAULT_THRESHOLD

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AutomationReadinessParams":
        defaults = cls()
        return cls(
            threshold=data.get("threshold", defaults.threshold),
            guardrail_bonus=data.get("guardrail_bonus", defaults.guardrail_bonus),
            high_risk_min_guardrails=data.get(
                "high_risk_min_guardrails", defaults.high_risk_min_guardrails
            ),
            tipping_point_per_month=data.get(
                "tipping_point_per_month", defaults.tipping_point_per_month
            ),
        )

    @staticmethod
    def check(data: Mapping[str, Any]) -> list[str]:
        bonus = data.get("guardrail_bonus", 0)
        if isinstance(bonus, int | float) and bonus < 0:
            return ["PV_PM_001.guardrail_bonus: Cannot be negative"]
        return []


@dataclass(frozen=True)
class AutomationContext:
    """Fields read from the phase output."""

    task: str
    risk_level: str | None
    guardrail_count: int
    readiness: float | None
    frequency: float | None

    @classmethod
    def from_mapping(cls, context: Mapping[str, Any]) -> "AutomationContext":
        raw_risk = context.get("riskLevel", "low")
        risk = raw_risk.lower() if isinstance(raw_risk, str) else None
        if risk not in RISK_LEVELS:
            risk = None

        guardrails = context.get("guardrails")
        if isinstance(guardrails, list | tuple):
            count = len(guardrails)
        elif context.get("hasGuardrails") is True:
            count = 1
        else:
            count = 0

        frequency = context.get("frequency")
        if (
            isinstance(frequency, bool)
            or not isinstance(frequency, int | float)
            or not math.isfinite(frequency)
        ):
            frequency = None

        return cls(
            task=str(context.get("task", "task")),
            risk_level=risk,
            guardrail_count=count,
            readiness=read_unit(context, "automationReadiness"),
            frequency=frequency,
        )


def evaluate(
    params: AutomationReadinessParams, context: Mapping[str, Any]
) -> HeuristicOutcome:
    ctx = AutomationContext.from_mapping(context)

    # checked before anything else: readiness cannot buy back missing guardrails
    if ctx.risk_level == "high" and ctx.guardrail_count == 0:
        return HeuristicOutcome(
            score=0.0,
            recommendation=Recommendation.ADD_GUARDRAILS_FIRST,
            veto_triggered=True,
            veto_reason=VETO_REASON,
            vetoes=(
                VetoDetail(
                    veto_type=VETO_REASON,
                    actor=ctx.task,
                    value="riskLevel=high, guardrails=0",
                    threshold="at least 1 guardrail",
                    message=f"{ctx.task} is high risk and defines no guardrails",
                ),
            ),
        )

    readiness = ctx.readiness
    if ctx.risk_level is None or readiness is None:
        missing = []
        if ctx.risk_level is None:
            missing.append("riskLevel")
        if readiness is None:
            missing.append("automationReadiness")
        return conservative_failure(NAME, BANDS.failing, missing)

    bonus = 0.0
    if ctx.risk_level == "medium" and ctx.guardrail_count >= 1:
        bonus = params.guardrail_bonus
    elif (
        ctx.risk_level == "high"
        and ctx.guardrail_count >= params.high_risk_min_guardrails
    ):
        bonus = params.guardrail_bonus
    score = clamp_score(readiness * 10 + bonus)

    tipping_point = (
        ctx.frequency > params.tipping_point_per_month
        if ctx.frequency is not None
        else None
    )
    criteria = [
        CriterionResult(
            criterion="Automation readiness",
            passed=score >= params.pass_bar,
            actual=round(score, 2),
            expected=f">= {params.pass_bar:.1f}",
        )
    ]
    if tipping_point is not None:
        criteria.append(
            CriterionResult(
                criterion="Tipping point",
                passed=tipping_point,
                actual=f"{ctx.frequency:g} per month",
                expected=f"> {params.tipping_point_per_month:g} per month",
            )
        )

    return HeuristicOutcome(
        score=score,
        recommendation=BANDS.classify(score, params.pass_bar),
        criteria=tuple(criteria),
        details={
            "risk_level": ctx.risk_level,
            "guardrails": ctx.guardrail_count,
            "bonus": bonus,
            "tipping_point_reached": tipping_point,
            "automation_candidate": bool(tipping_point)
            and score >= params.pass_bar,
        },
    )
