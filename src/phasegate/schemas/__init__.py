"""phasegate JSON Schema definitions and validation utilities.

Schemas:
    - mind.schema.json: Mind document (heuristic parameters, axioma dimensions)
    - engine_config.schema.json: Engine configuration file
    - workflow.schema.json: Workflow definition (phases and checkpoints)

Usage:
    from phasegate.schemas import schema_errors

    with open("workflow.json") as f:
        data = json.load(f)
    problems = schema_errors("workflow.schema.json", data)  # [] when valid
"""

from __future__ import annotations

import json
from functools import cache
from importlib.resources import files
from typing import Any

import jsonschema


@cache
def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema from the schemas package.

    Args:
        name: Schema filename (e.g., 'workflow.schema.json')

    Returns:
        Parsed JSON schema as a dictionary
    """
    schema_text = files("phasegate.schemas").joinpath(name).read_text()
    result: dict[str, Any] = json.loads(schema_text)
    return result


def schema_errors(name: str, data: Any) -> list[str]:
    """Collect every schema violation as ``path: message`` strings.

    Args:
        name: Schema filename
        data: Parsed JSON document

    Returns:
        Violations sorted by location; empty when the document is valid
    """
    validator = jsonschema.Draft202012Validator(_load_schema(name))
    errors = sorted(validator.iter_errors(data), key=lambda e: e.json_path)
    return [f"{e.json_path}: {e.message}" for e in errors]


__all__ = [
    "schema_errors",
]
