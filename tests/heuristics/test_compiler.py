"""Tests for the heuristic registry and compiler."""

import pytest

from phasegate.domain.exceptions import UnknownHeuristicError
from phasegate.domain.models import HeuristicId, Recommendation
from phasegate.heuristics import (
    REGISTRY,
    CoherenceParams,
    HeuristicCompiler,
    StrategicAlignmentParams,
    parse_heuristic_params,
)


class TestRegistry:
    """The registry covers every heuristic id."""

    def test_every_id_is_registered(self):
        assert set(REGISTRY) == set(HeuristicId)

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            REGISTRY[HeuristicId.COHERENCE_SCAN] = None  # type: ignore[index]


class TestHeuristicCompiler:
    """Tests for HeuristicCompiler."""

    def test_compile_by_string_id(self):
        heuristic = HeuristicCompiler().compile("PV_BS_001")

        assert heuristic.heuristic_id is HeuristicId.STRATEGIC_ALIGNMENT
        assert heuristic.name == "strategic-alignment"

    def test_compile_is_cached(self):
        """Repeated lookups return the same compiled object."""
        compiler = HeuristicCompiler()

        first = compiler.compile("PV_PA_001")
        second = compiler.compile(HeuristicId.COHERENCE_SCAN)

        assert first is second
        assert compiler.compiled_ids == (HeuristicId.COHERENCE_SCAN,)

    def test_unknown_id_raises(self):
        with pytest.raises(UnknownHeuristicError):
            HeuristicCompiler().compile("PV_ZZ_000")

    def test_missing_registry_entry_raises(self):
        registry = {
            HeuristicId.STRATEGIC_ALIGNMENT: REGISTRY[HeuristicId.STRATEGIC_ALIGNMENT]
        }
        compiler = HeuristicCompiler(registry=registry)

        with pytest.raises(UnknownHeuristicError):
            compiler.compile("PV_PM_001")

    def test_compile_all(self):
        compiled = HeuristicCompiler().compile_all()
        assert set(compiled) == set(HeuristicId)

    def test_params_are_bound(self):
        """Compiled heuristics use the parameters they were compiled with."""
        compiler = HeuristicCompiler(
            {
                HeuristicId.STRATEGIC_ALIGNMENT: StrategicAlignmentParams(
                    clarity_weight=0.5, vision_weight=0.5
                )
            }
        )
        outcome = compiler.compile("PV_BS_001")(
            {"endStateClarity": 0.6, "visionAlignment": 1.0}
        )
        assert outcome.score == pytest.approx(8.0)

    def test_compiled_heuristic_is_pure(self):
        heuristic = HeuristicCompiler().compile("PV_PA_001")
        context = {"truthfulness": 0.9, "systemAdherence": 0.8, "skillMatch": 0.7}

        assert heuristic.evaluate(context) == heuristic.evaluate(context)
        assert context == {"truthfulness": 0.9, "systemAdherence": 0.8, "skillMatch": 0.7}

    def test_threshold_carried_only_when_set(self):
        assert HeuristicCompiler().compile("PV_BS_001").threshold is None

        compiler = HeuristicCompiler(
            {HeuristicId.STRATEGIC_ALIGNMENT: StrategicAlignmentParams(threshold=9.0)}
        )
        assert compiler.compile("PV_BS_001").threshold == 9.0

    def test_bands_come_from_registry(self):
        heuristic = HeuristicCompiler().compile("PV_PM_001")
        assert heuristic.bands.passing is Recommendation.APPROVE
        assert heuristic.bands.failing is Recommendation.IMPROVE_READINESS


class TestParseHeuristicParams:
    """Tests for parsing the heuristics section of a mind document."""

    def test_parses_known_sections(self):
        params, errors = parse_heuristic_params(
            {"PV_PA_001": {"thresholds": {"veto": 0.65}}, "PV_BS_001": {}}
        )
        assert errors == []
        assert params[HeuristicId.COHERENCE_SCAN] == CoherenceParams(veto_floor=0.65)
        assert params[HeuristicId.STRATEGIC_ALIGNMENT] == StrategicAlignmentParams()

    def test_collects_every_error(self):
        params, errors = parse_heuristic_params(
            {
                "PV_XX_001": {},
                "PV_BS_001": {"weights": {"end_state_clarity": "high"}},
            }
        )
        assert params == {}
        assert "Unknown heuristic: 'PV_XX_001'" in errors
        assert "PV_BS_001.weights.end_state_clarity: Must be a number" in errors
