"""Configuration loading: engine settings and workflow definitions."""

from __future__ import annotations

import json
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from phasegate.domain.config import EngineConfig
from phasegate.domain.exceptions import ConfigurationError
from phasegate.domain.models import WorkflowDefinition
from phasegate.schemas import schema_errors

ENV_PREFIX = "PHASEGATE_"


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"not a boolean: {raw!r}")


# env suffix -> (config key, parser)
ENV_OVERRIDES: dict[str, tuple[str, Callable[[str], Any]]] = {
    "MODE": ("mode", lambda raw: raw.strip().upper()),
    "HEURISTICS_ENABLED": ("heuristics_enabled", _parse_bool),
    "AXIOMA_ENABLED": ("axioma_enabled", _parse_bool),
    "MINIMUM_SCORE": ("minimum_score", float),
    "SCORE_EPSILON": ("score_epsilon", float),
    "MAX_RETRIES": ("max_retries", int),
    "MIND_PATH": ("mind_path", str),
}


def _read_json(path: Path) -> dict[str, Any]:
    """
    Read a JSON object from ``path``.

    Raises:
        ConfigurationError: If the file is missing, not JSON, or not an object
    """
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected dict in {path}, got {type(data).__name__}")
    return data


def apply_env_overrides(
    data: Mapping[str, Any], environ: Mapping[str, str]
) -> dict[str, Any]:
    """
    Overlay ``PHASEGATE_*`` environment variables on raw config data.

    Raises:
        ConfigurationError: If a variable cannot be parsed
    """
    merged = dict(data)
    for suffix, (key, parse) in ENV_OVERRIDES.items():
        name = ENV_PREFIX + suffix
        if name not in environ:
            continue
        try:
            merged[key] = parse(environ[name])
        except ValueError as e:
            raise ConfigurationError(f"Invalid value for {name}: {e}") from e
    return merged


def engine_config_from_dict(
    data: Mapping[str, Any], environ: Mapping[str, str] | None = None
) -> EngineConfig:
    """
    Validate raw settings (after env overrides) and build an EngineConfig.

    Raises:
        ConfigurationError: With every problem found in ``errors``
    """
    merged = apply_env_overrides(data, os.environ if environ is None else environ)
    errors = schema_errors("engine_config.schema.json", merged)
    if not errors:
        config = EngineConfig.from_dict(merged)
        t = config.alert_thresholds
        if not t.info <= t.warning <= t.critical:
            errors.append("alerts.thresholds: expected info <= warning <= critical")
    if errors:
        raise ConfigurationError(
            "Invalid engine configuration: " + "; ".join(errors), tuple(errors)
        )
    return config


def load_engine_config(
    path: Path | None = None, environ: Mapping[str, str] | None = None
) -> EngineConfig:
    """
    Load engine configuration from JSON, then apply environment overrides.

    Args:
        path: Config file; None uses defaults plus environment
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Validated EngineConfig

    Raises:
        ConfigurationError: If the file or any override is invalid
    """
    data = _read_json(path) if path is not None else {}
    return engine_config_from_dict(data, environ)


def load_workflow(path: Path) -> WorkflowDefinition:
    """
    Load a workflow definition from JSON.

    Raises:
        ConfigurationError: If the file is missing or fails schema validation
    """
    data = _read_json(path)
    errors = schema_errors("workflow.schema.json", data)
    if errors:
        raise ConfigurationError(
            f"Invalid workflow definition {path}: " + "; ".join(errors), tuple(errors)
        )
    return WorkflowDefinition.from_dict(data)
