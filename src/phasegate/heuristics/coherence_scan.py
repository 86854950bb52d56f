"""
Coherence scan heuristic (PV_PA_001).

Checks every executor on a team for truthfulness, adherence to the system
and skill match. Truthfulness below the veto floor is an absolute rejection:
no amount of skill offsets it.
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
    VetoDetail,
)

from .base import clamp_score, conservative_failure, read_unit, weight_errors

NAME = "coherence-scan"
VETO_REASON = "TRUTHFULNESS_BELOW_THRESHOLD"

BANDS = RecommendationBands(
    passing=Recommendation.APPROVE,
    marginal=Recommendation.REFINE,
    failing=Recommendation.DEFER,
)

_SIGNALS = (
    ("truthfulness", "truthfulness"),
    ("systemAdherence", "system_adherence"),
    ("skillMatch", "skill_match"),
)


@dataclass(frozen=True)
class CoherenceParams:
    """Signal weights and floors for PV_PA_001."""

    truthfulness_weight: float = 0.5
    system_adherence_weight: float = 0.3
    skill_match_weight: float = 0.2
    veto_floor: float = 0.70
    review_floor: float = 0.75
    approve_floor: float = 0.80
    threshold: float | None = None  # None defers to the checkpoint or engine

    @property
    def pass_bar(self) -> float:
        return self.threshold if self.threshold is not None else DEFAULT_THRESHOLD

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CoherenceParams":
        defaults = cls()
        weights = data.get("weights", {})
        thresholds = data.get("thresholds", {})
        return cls(
            truthfulness_weight=weights.get(
                "truthfulness", defaults.truthfulness_weight
            ),
            system_adherence_weight=weights.get(
                "system_adherence", defaults.system_adherence_weight
            ),
            skill_match_weight=weights.get("skill_match", defaults.skill_match_weight),
            veto_floor=thresholds.get("veto", defaults.veto_floor),
            review_floor=thresholds.get("review", defaults.review_floor),
            approve_floor=thresholds.get("approve", defaults.approve_floor),
            threshold=data.get("threshold", defaults.threshold),
        )

    @staticmethod
    def check(data: Mapping[str, Any]) -> list[str]:
        errors = []
        if "weights" in data:
            errors.extend(weight_errors("PV_PA_001.weights", data["weights"]))
        merged = CoherenceParams.from_dict(data)
        if not merged.veto_floor < merged.review_floor:
            errors.append("PV_PA_001.thresholds: veto must be lower than review")
        if not merged.review_floor <= merged.approve_floor:
            errors.append("PV_PA_001.thresholds: review must not exceed approve")
        return errors

    def weigh(self, truthfulness: float, adherence: float, skill: float) -> float:
        return (
            truthfulness * self.truthfulness_weight
            + adherence * self.system_adherence_weight
            + skill * self.skill_match_weight
        )


@dataclass(frozen=True)
class TeamMember:
    """One executor's signals as read from the context."""

    name: str
    truthfulness: float | None
    system_adherence: float | None
    skill_match: float | None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], index: int) -> "TeamMember":
        name = data.get("name") or data.get("executor") or f"member-{index + 1}"
        return cls(
            name=str(name),
            truthfulness=read_unit(data, "truthfulness"),
            system_adherence=read_unit(data, "systemAdherence"),
            skill_match=read_unit(data, "skillMatch"),
        )

    def signals(self) -> tuple[float, float, float] | None:
        """(truthfulness, adherence, skill), or None when any is missing."""
        if (
            self.truthfulness is None
            or self.system_adherence is None
            or self.skill_match is None
        ):
            return None
        return self.truthfulness, self.system_adherence, self.skill_match

    def missing(self, prefix: str) -> list[str]:
        values = (self.truthfulness, self.system_adherence, self.skill_match)
        return [
            f"{prefix}{key}"
            for (key, _), value in zip(_SIGNALS, values, strict=True)
            if value is None
        ]


def _team_from_context(context: Mapping[str, Any]) -> list[TeamMember] | None:
    if "team" not in context:
        # single executor given as flat fields
        return [TeamMember.from_mapping(context, 0)]
    team = context["team"]
    if not isinstance(team, list | tuple) or not team:
        return None
    return [
        TeamMember.from_mapping(m if isinstance(m, Mapping) else {}, i)
        for i, m in enumerate(team)
    ]


def _rating(params: CoherenceParams, unit_score: float) -> str:
    if unit_score >= params.approve_floor:
        return "coherent"
    if unit_score >= params.review_floor:
        return "review"
    return "incoherent"


def evaluate(params: CoherenceParams, context: Mapping[str, Any]) -> HeuristicOutcome:
    team = _team_from_context(context)
    if team is None:
        return conservative_failure(NAME, BANDS.failing, ["team"])

    flat = "team" not in context
    vetoes = [
        VetoDetail(
            veto_type=VETO_REASON,
            actor=member.name,
            value=member.truthfulness,
            threshold=params.veto_floor,
            message=(
                f"{member.name} truthfulness {member.truthfulness:.2f} "
                f"is below the {params.veto_floor:.2f} floor"
            ),
        )
        for member in team
        if member.truthfulness is not None
        and member.truthfulness < params.veto_floor
    ]
    if vetoes:
        return HeuristicOutcome(
            score=0.0,
            recommendation=Recommendation.REJECT,
            veto_triggered=True,
            veto_reason=VETO_REASON,
            vetoes=tuple(vetoes),
        )

    missing: list[str] = []
    scored: list[tuple[TeamMember, tuple[float, float, float]]] = []
    for i, member in enumerate(team):
        signals = member.signals()
        if signals is None:
            missing.extend(member.missing("" if flat else f"team[{i}]."))
        else:
            scored.append((member, signals))
    if missing:
        return conservative_failure(NAME, BANDS.failing, missing)

    criteria = []
    members = []
    for member, signals in scored:
        unit = params.weigh(*signals)
        member_score = clamp_score(unit * 10)
        members.append(
            {
                "name": member.name,
                "score": member_score,
                "rating": _rating(params, unit),
            }
        )
        criteria.append(
            CriterionResult(
                criterion=f"{member.name} coherence",
                passed=unit >= params.review_floor,
                actual=round(member_score, 2),
                expected=f">= {params.review_floor * 10:.1f}",
            )
        )

    # a team is only as coherent as its weakest executor
    score = min(m["score"] for m in members)
    return HeuristicOutcome(
        score=score,
        recommendation=BANDS.classify(score, params.pass_bar),
        criteria=tuple(criteria),
        details={"members": members},
    )
