"""
Application layer for the phase-gated validation engine.

Orchestrates domain objects: caches the mind, manages sessions, executes
checkpoints, renders feedback and sequences workflow phases.
"""

from phasegate.application.executors import (
    CallbackExecutor,
    ScriptedExecutor,
    ScriptedRecoveryPolicy,
    StaticRecoveryPolicy,
)
from phasegate.application.feedback import (
    generate_criteria_failure_feedback,
    generate_success_feedback,
    generate_veto_feedback,
    render_feedback,
)
from phasegate.application.gate_engine import ValidationGateEngine
from phasegate.application.mind_document import build_bundle
from phasegate.application.mind_store import MindArtifactStore
from phasegate.application.orchestrator import WorkflowOrchestrator
from phasegate.application.run_event_emitter import RunEventEmitter
from phasegate.application.session import SessionManager

__all__ = [
    "CallbackExecutor",
    "ScriptedExecutor",
    "ScriptedRecoveryPolicy",
    "StaticRecoveryPolicy",
    "generate_criteria_failure_feedback",
    "generate_success_feedback",
    "generate_veto_feedback",
    "render_feedback",
    "ValidationGateEngine",
    "build_bundle",
    "MindArtifactStore",
    "WorkflowOrchestrator",
    "RunEventEmitter",
    "SessionManager",
]
