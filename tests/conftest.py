"""Shared pytest fixtures for phasegate tests."""

import json

import pytest

from phasegate.application.gate_engine import ValidationGateEngine
from phasegate.application.mind_document import build_bundle
from phasegate.application.mind_store import MindArtifactStore
from phasegate.application.session import SessionManager
from phasegate.domain.interfaces import MindSourceSnapshot
from phasegate.domain.models import (
    CheckpointConfig,
    MindArtifactBundle,
    Phase,
    WorkflowDefinition,
)
from phasegate.infrastructure.persistence.mind_sources import InMemoryMindSource
from phasegate.resources import default_mind_path


@pytest.fixture
def mind_document() -> dict:
    """The packaged default mind document as a plain dict."""
    return json.loads(default_mind_path().read_text())


@pytest.fixture
def mind_source(mind_document: dict) -> InMemoryMindSource:
    return InMemoryMindSource(mind_document, location="test-mind")


@pytest.fixture
def mind_store(mind_source: InMemoryMindSource) -> MindArtifactStore:
    return MindArtifactStore(mind_source)


@pytest.fixture
def session_manager(mind_store: MindArtifactStore) -> SessionManager:
    return SessionManager(mind_store)


@pytest.fixture
def bundle(mind_document: dict) -> MindArtifactBundle:
    """A compiled bundle built straight from the default document."""
    return build_bundle(
        MindSourceSnapshot(data=mind_document, fingerprint="0", location="test-mind")
    )


@pytest.fixture
def engine(bundle: MindArtifactBundle) -> ValidationGateEngine:
    return ValidationGateEngine.for_bundle(bundle)


@pytest.fixture
def discovery_phase() -> Phase:
    return Phase(
        name="discovery",
        validation=CheckpointConfig(
            checkpoint="strategic-alignment",
            heuristic="PV_BS_001",
            feedback_on_failure=("Add measurable success criteria",),
        ),
    )


@pytest.fixture
def architecture_phase() -> Phase:
    return Phase(
        name="architecture",
        validation=CheckpointConfig(
            checkpoint="coherence-scan",
            heuristic="PV_PA_001",
            veto_conditions=("Any executor with truthfulness below 0.70",),
        ),
    )


@pytest.fixture
def qa_phase() -> Phase:
    return Phase(
        name="qa",
        validation=CheckpointConfig(checkpoint="task-anatomy", validator="task-anatomy"),
    )


@pytest.fixture
def delivery_phase() -> Phase:
    return Phase(name="delivery")


@pytest.fixture
def workflow(
    discovery_phase: Phase,
    architecture_phase: Phase,
    qa_phase: Phase,
    delivery_phase: Phase,
) -> WorkflowDefinition:
    return WorkflowDefinition(
        name="test-workflow",
        phases=(discovery_phase, architecture_phase, qa_phase, delivery_phase),
    )


@pytest.fixture
def passing_outputs() -> dict:
    """Phase outputs that clear every checkpoint of the ``workflow`` fixture."""
    return {
        "discovery": {"endStateClarity": 0.85, "visionAlignment": 0.85},
        "architecture": {
            "team": [
                {"name": "planner", "truthfulness": 0.9, "systemAdherence": 0.85, "skillMatch": 0.8},
                {"name": "coder", "truthfulness": 0.88, "systemAdherence": 0.8, "skillMatch": 0.9},
            ]
        },
        "qa": {
            "input": "Customer list",
            "outcome": "Segmented list",
            "process": "Group by region",
            "success": "Every customer in one segment",
        },
        "delivery": {"summary": "done"},
    }
