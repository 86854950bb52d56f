"""Packaged data files: the default mind document and workflow."""

from importlib.resources import files
from pathlib import Path

DEFAULT_MIND_FILE = "default_mind.json"
DEFAULT_WORKFLOW_FILE = "default_workflow.json"


def _resource_path(name: str) -> Path:
    return Path(str(files("phasegate.resources").joinpath(name)))


def default_mind_path() -> Path:
    """Filesystem path of the mind document shipped with the package."""
    return _resource_path(DEFAULT_MIND_FILE)


def default_workflow_path() -> Path:
    """Six-phase workflow: discovery, architecture, executors, workflows, qa, delivery."""
    return _resource_path(DEFAULT_WORKFLOW_FILE)
