"""
Phase heuristics for the validation engine.

Each heuristic is a pure evaluator over a context map, bound to frozen
parameters by the HeuristicCompiler:

- strategic_alignment: PV_BS_001
- coherence_scan: PV_PA_001 (truthfulness veto)
- automation_readiness: PV_PM_001 (guardrail veto, tipping point)
"""

from phasegate.heuristics.automation_readiness import AutomationReadinessParams
from phasegate.heuristics.coherence_scan import CoherenceParams
from phasegate.heuristics.compiler import (
    REGISTRY,
    HeuristicCompiler,
    HeuristicSpec,
    parse_heuristic_params,
)
from phasegate.heuristics.strategic_alignment import StrategicAlignmentParams

__all__ = [
    "REGISTRY",
    "HeuristicCompiler",
    "HeuristicSpec",
    "parse_heuristic_params",
    "StrategicAlignmentParams",
    "CoherenceParams",
    "AutomationReadinessParams",
]
