"""
Mind document parsing.

Turns a raw mind document into an immutable MindArtifactBundle: schema
validation, semantic checks on weights and thresholds, then compilation of
every heuristic the document configures.
"""

from datetime import datetime, timezone

from phasegate.domain.exceptions import MindArtifactError
from phasegate.domain.interfaces import MindSourceSnapshot
from phasegate.domain.models import (
    AxiomaDimension,
    AxiomaPolicy,
    MindArtifactBundle,
    thaw,
)
from phasegate.heuristics.base import weight_errors
from phasegate.heuristics.compiler import HeuristicCompiler, parse_heuristic_params
from phasegate.schemas import schema_errors


def _policy_from(section: dict) -> tuple[AxiomaPolicy | None, list[str]]:
    dims = section["dimensions"]
    errors = []
    names = [d["name"] for d in dims]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        errors.append(f"axiomas.dimensions: duplicate names {duplicates}")
    errors.extend(
        weight_errors("axiomas.dimensions", {d["name"]: d["weight"] for d in dims})
    )
    if errors:
        return None, errors

    defaults = AxiomaPolicy(dimensions=())
    return (
        AxiomaPolicy(
            dimensions=tuple(AxiomaDimension(d["name"], d["weight"]) for d in dims),
            critical_floor=section.get("critical_floor", defaults.critical_floor),
            critical_penalty=section.get("critical_penalty", defaults.critical_penalty),
            violation_floor=section.get("violation_floor", defaults.violation_floor),
            violation_display_limit=section.get(
                "violation_display_limit", defaults.violation_display_limit
            ),
        ),
        [],
    )


def build_bundle(snapshot: MindSourceSnapshot) -> MindArtifactBundle:
    """
    Validate and compile a mind document.

    Args:
        snapshot: Raw document plus its fingerprint and location

    Returns:
        Immutable bundle of compiled heuristics and the axioma policy

    Raises:
        MindArtifactError: If the document fails schema or semantic checks
    """
    data = thaw(snapshot.data)
    problems = schema_errors("mind.schema.json", data)
    if problems:
        raise MindArtifactError(
            "Mind document failed schema validation: " + "; ".join(problems),
            source=snapshot.location,
        )

    params, errors = parse_heuristic_params(data["heuristics"])
    policy, axioma_errors = _policy_from(data["axiomas"])
    errors.extend(axioma_errors)
    if errors or policy is None:
        raise MindArtifactError(
            "Mind document is inconsistent: " + "; ".join(errors),
            source=snapshot.location,
        )

    compiler = HeuristicCompiler(params)
    return MindArtifactBundle(
        heuristics={hid: compiler.compile(hid) for hid in params},
        axiomas=policy,
        version=data["version"],
        source=snapshot.location,
        fingerprint=snapshot.fingerprint,
        loaded_at=datetime.now(timezone.utc).isoformat(),
    )
