"""
Heuristic registry and compiler.

The registry maps every HeuristicId to its evaluator, parameter type and
recommendation bands. The compiler binds parameters to an evaluator once per
id and caches the result, so repeated lookups are dictionary hits.

Compiled heuristics close over frozen parameter objects only; evaluation is
a pure function of the context.
"""

import functools
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from phasegate.domain.exceptions import UnknownHeuristicError
from phasegate.domain.models import (
    Heuristic,
    HeuristicId,
    HeuristicOutcome,
    RecommendationBands,
)

from . import automation_readiness, coherence_scan, strategic_alignment

logger = logging.getLogger(__name__)

HeuristicParams = (
    strategic_alignment.StrategicAlignmentParams
    | coherence_scan.CoherenceParams
    | automation_readiness.AutomationReadinessParams
)


@dataclass(frozen=True)
class HeuristicSpec:
    """Registry entry for one heuristic."""

    name: str
    params_type: type
    evaluate: Callable[[Any, Mapping[str, Any]], HeuristicOutcome]
    bands: RecommendationBands

    def parse_params(self, data: Mapping[str, Any]) -> Any:
        return self.params_type.from_dict(data)

    def check_params(self, data: Mapping[str, Any]) -> list[str]:
        errors: list[str] = self.params_type.check(data)
        return errors


REGISTRY: Mapping[HeuristicId, HeuristicSpec] = MappingProxyType(
    {
        HeuristicId.STRATEGIC_ALIGNMENT: HeuristicSpec(
            name=strategic_alignment.NAME,
            params_type=strategic_alignment.StrategicAlignmentParams,
            evaluate=strategic_alignment.evaluate,
            bands=strategic_alignment.BANDS,
        ),
        HeuristicId.COHERENCE_SCAN: HeuristicSpec(
            name=coherence_scan.NAME,
            params_type=coherence_scan.CoherenceParams,
            evaluate=coherence_scan.evaluate,
            bands=coherence_scan.BANDS,
        ),
        HeuristicId.AUTOMATION_READINESS: HeuristicSpec(
            name=automation_readiness.NAME,
            params_type=automation_readiness.AutomationReadinessParams,
            evaluate=automation_readiness.evaluate,
            bands=automation_readiness.BANDS,
        ),
    }
)

_unregistered = set(HeuristicId) - set(REGISTRY)
if _unregistered:
    raise RuntimeError(f"HeuristicId values without an evaluator: {_unregistered}")


class HeuristicCompiler:
    """
    Compiles heuristic ids into callables, caching per id.

    Args:
        params: Parameters per heuristic; ids not listed use defaults
        registry: Evaluator table, overridable for tests
    """

    def __init__(
        self,
        params: Mapping[HeuristicId, Any] | None = None,
        registry: Mapping[HeuristicId, HeuristicSpec] = REGISTRY,
    ) -> None:
        self._params = dict(params or {})
        self._registry = registry
        self._compiled: dict[HeuristicId, Heuristic] = {}

    def compile(self, heuristic_id: "str | HeuristicId") -> Heuristic:
        """
        Resolve an id to a compiled heuristic.

        Raises:
            UnknownHeuristicError: If the id is not registered
        """
        hid = HeuristicId.parse(heuristic_id)
        cached = self._compiled.get(hid)
        if cached is not None:
            return cached

        spec = self._registry.get(hid)
        if spec is None:
            raise UnknownHeuristicError(heuristic_id)

        params = self._params.get(hid)
        if params is None:
            params = spec.params_type()
        heuristic = Heuristic(
            heuristic_id=hid,
            name=spec.name,
            evaluator=functools.partial(spec.evaluate, params),
            bands=spec.bands,
            threshold=params.threshold,
        )
        self._compiled[hid] = heuristic
        logger.debug("Compiled heuristic %s (%s)", hid.value, spec.name)
        return heuristic

    def compile_all(self) -> dict[HeuristicId, Heuristic]:
        return {hid: self.compile(hid) for hid in self._registry}

    @property
    def compiled_ids(self) -> tuple[HeuristicId, ...]:
        return tuple(self._compiled)


def parse_heuristic_params(
    sections: Mapping[str, Mapping[str, Any]],
    registry: Mapping[HeuristicId, HeuristicSpec] = REGISTRY,
) -> tuple[dict[HeuristicId, Any], list[str]]:
    """
    Turn the ``heuristics`` section of a mind document into parameter objects.

    Returns:
        (params by id, semantic errors); params is empty when errors exist
    """
    errors: list[str] = []
    params: dict[HeuristicId, Any] = {}
    for raw_id, section in sections.items():
        try:
            hid = HeuristicId.parse(raw_id)
        except UnknownHeuristicError as e:
            errors.append(str(e))
            continue
        spec = registry[hid]
        section_errors = spec.check_params(section)
        if section_errors:
            errors.extend(section_errors)
            continue
        params[hid] = spec.parse_params(section)
    if errors:
        return {}, errors
    return params, []
