"""
FeedbackGenerator: renders ValidationResults as actionable guidance.

Pure functions. They read a result and return text; they never change
``passed``, ``veto`` or ``score``. Veto messages always contain the word
VETO so downstream tooling can grep for them.
"""

import re
from typing import Any

from phasegate.domain.models import (
    CheckpointConfig,
    CriterionResult,
    ValidationResult,
    recovery_options_for,
)

DOCS_ROOT = "docs/checkpoints"


def title_case(gate: str) -> str:
    """'strategic-alignment' / 'strategic_alignment' -> 'Strategic Alignment'."""
    words = [w for w in re.split(r"[-_\s]+", gate) if w]
    return " ".join(w[:1].upper() + w[1:] for w in words)


def documentation_pointer(gate: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", gate.lower()).strip("-") or "checkpoint"
    return f"{DOCS_ROOT}/{slug}.md"


def _fmt(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def _options_line(result: ValidationResult) -> str:
    return "Options: " + " ".join(f"[{a.value}]" for a in recovery_options_for(result))


def _failed(criteria: tuple[CriterionResult, ...]) -> list[CriterionResult]:
    return [c for c in criteria if not c.passed]


def generate_success_feedback(gate: str, result: ValidationResult) -> str:
    summary = f"score {result.score:.1f}/10"
    if result.threshold is not None:
        summary += f", threshold {result.threshold:.1f}"
    lines = [f"PASSED: {title_case(gate)} ({summary})"]
    if result.recommendation:
        lines.append(f"Recommendation: {result.recommendation.value}")
    return "\n".join(lines)


def generate_criteria_failure_feedback(
    gate: str,
    result: ValidationResult,
    checkpoint: CheckpointConfig | None = None,
) -> str:
    """
    Failure guidance for a non-veto result.

    Lists each failed criterion with actual and expected values, any missing
    fields, the remediation hints configured on the checkpoint, the recovery
    options and a documentation pointer.
    """
    lines = [f"VALIDATION FAILED: {title_case(gate)} checkpoint '{gate}'"]
    if result.threshold is not None:
        lines.append(
            f"Score: {result.score:.1f} (expected >= {result.threshold:.1f})"
        )
    else:
        lines.append(f"Score: {result.score:.1f}")
    if result.recommendation:
        lines.append(f"Recommendation: {result.recommendation.value}")

    failed = _failed(result.criteria)
    if failed:
        lines.append("")
        lines.append("Failed criteria:")
        for c in failed:
            entry = (
                f"  - {c.criterion}: actual {_fmt(c.actual)}, "
                f"expected {_fmt(c.expected)}"
            )
            if c.message:
                entry += f" ({c.message})"
            lines.append(entry)

    if result.missing_fields:
        lines.append(f"Missing fields: {', '.join(result.missing_fields)}")
    if result.violations:
        lines.append(f"Violations ({result.violations_count}):")
        lines.extend(f"  - {v}" for v in result.violations)

    hints = checkpoint.feedback_on_failure if checkpoint else ()
    if hints:
        lines.append("")
        lines.append("How to fix:")
        lines.extend(f"  - {hint}" for hint in hints)

    lines.append("")
    lines.append(_options_line(result))
    lines.append(f"Documentation: {documentation_pointer(gate)}")
    return "\n".join(lines)


def generate_veto_feedback(
    gate: str,
    result: ValidationResult,
    checkpoint: CheckpointConfig | None = None,
) -> str:
    lines = [
        f"VETO: {title_case(gate)} checkpoint '{gate}' rejected"
        + (f" ({result.veto_reason})" if result.veto_reason else ""),
    ]
    if result.vetoes:
        for v in result.vetoes:
            entry = (
                f"  - {v.actor}: {_fmt(v.value)} breached threshold "
                f"{_fmt(v.threshold)} [{v.veto_type}]"
            )
            if v.message:
                entry += f" {v.message}"
            lines.append(entry)
    else:
        lines.append(f"  - reason: {result.veto_reason or 'unspecified'}")

    lines.append("Score: 0 (a veto overrides every other criterion)")
    if result.recommendation:
        lines.append(f"Recommendation: {result.recommendation.value}")

    conditions = checkpoint.veto_conditions if checkpoint else ()
    if conditions:
        lines.append("Veto conditions:")
        lines.extend(f"  - {c}" for c in conditions)

    lines.append("")
    lines.append(_options_line(result))
    lines.append(f"Documentation: {documentation_pointer(gate)}")
    return "\n".join(lines)


def render_feedback(
    result: ValidationResult, checkpoint: CheckpointConfig | None = None
) -> str:
    """Pick the right renderer for a result. Empty for skips and errors."""
    if result.skipped or result.error:
        return ""
    if result.veto:
        return generate_veto_feedback(result.gate, result, checkpoint)
    if result.passed:
        return generate_success_feedback(result.gate, result)
    return generate_criteria_failure_feedback(result.gate, result, checkpoint)
