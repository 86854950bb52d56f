"""
Shared helpers for heuristic evaluators.

Contexts are untyped key-value maps produced by phase executors. Evaluators
never index them directly; they go through the defensive readers here so a
missing or garbled field becomes a conservative failing outcome instead of
an exception.
"""

import math
from collections.abc import Mapping
from typing import Any

from phasegate.domain.models import (
    MAX_SCORE,
    CriterionResult,
    HeuristicOutcome,
    Recommendation,
)

WEIGHT_SUM_TOLERANCE = 1e-6


def read_unit(context: Mapping[str, Any], key: str) -> float | None:
    """Return ``context[key]`` if it is a real number in [0, 1], else None."""
    value = context.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not math.isfinite(value) or not 0.0 <= value <= 1.0:
        return None
    return float(value)


def read_flag(context: Mapping[str, Any], key: str) -> bool | None:
    """Return a boolean field, or None when absent or not a bool."""
    value = context.get(key)
    return value if isinstance(value, bool) else None


def clamp_score(score: float) -> float:
    return max(0.0, min(MAX_SCORE, score))


def conservative_failure(
    heuristic: str,
    recommendation: Recommendation,
    missing: list[str],
) -> HeuristicOutcome:
    """Outcome for a context that lacks what the heuristic needs."""
    return HeuristicOutcome(
        score=0.0,
        recommendation=recommendation,
        missing_fields=tuple(missing),
        criteria=tuple(
            CriterionResult(
                criterion=name,
                passed=False,
                actual=None,
                expected="number in [0, 1]",
                message=f"{heuristic}: required field '{name}' missing or invalid",
            )
            for name in missing
        ),
        details={"incomplete_context": True},
    )


def weight_errors(prefix: str, weights: Mapping[str, Any]) -> list[str]:
    """Validate a weight group: numeric, non-negative, summing to 1.0."""
    errors: list[str] = []
    total = 0.0
    for name, value in weights.items():
        if isinstance(value, bool) or not isinstance(value, int | float):
            errors.append(f"{prefix}.{name}: Must be a number")
            continue
        if value < 0:
            errors.append(f"{prefix}.{name}: Cannot be negative")
        total += value
    if not errors and abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
        errors.append(f"{prefix}: Sum should equal 1.0 (got {total:.3f})")
    return errors
