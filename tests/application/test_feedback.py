"""Tests for feedback rendering."""

from phasegate.application.feedback import (
    documentation_pointer,
    generate_criteria_failure_feedback,
    generate_success_feedback,
    generate_veto_feedback,
    render_feedback,
    title_case,
)
from phasegate.domain.models import (
    CheckpointConfig,
    CriterionResult,
    Recommendation,
    ValidationResult,
    VetoDetail,
)


class TestHelpers:
    def test_title_case(self):
        assert title_case("strategic-alignment") == "Strategic Alignment"
        assert title_case("coherence_scan") == "Coherence Scan"

    def test_documentation_pointer(self):
        assert documentation_pointer("Coherence Scan") == "docs/checkpoints/coherence-scan.md"


class TestSuccessFeedback:
    def test_summary_line(self):
        result = ValidationResult(
            gate="strategic-alignment",
            passed=True,
            score=8.5,
            threshold=7.0,
            recommendation=Recommendation.APPROVE,
        )
        text = generate_success_feedback("strategic-alignment", result)
        assert text == (
            "PASSED: Strategic Alignment (score 8.5/10, threshold 7.0)\n"
            "Recommendation: APPROVE"
        )

    def test_without_threshold(self):
        result = ValidationResult(gate="task-anatomy", passed=True, score=10.0)
        assert generate_success_feedback("task-anatomy", result) == (
            "PASSED: Task Anatomy (score 10.0/10)"
        )


class TestFailureFeedback:
    """Non-veto failures are specific and actionable."""

    def _result(self) -> ValidationResult:
        return ValidationResult(
            gate="strategic-alignment",
            passed=False,
            score=6.1,
            threshold=7.0,
            recommendation=Recommendation.DEFER,
            criteria=(
                CriterionResult("End-state clarity", False, 0.5, ">= 0.70"),
                CriterionResult("Vision alignment", True, 0.8, ">= 0.70"),
            ),
            missing_fields=("successCriteria",),
        )

    def test_lists_failed_criteria_only(self):
        text = generate_criteria_failure_feedback("strategic-alignment", self._result())

        assert text.startswith(
            "VALIDATION FAILED: Strategic Alignment checkpoint 'strategic-alignment'"
        )
        assert "Score: 6.1 (expected >= 7.0)" in text
        assert "  - End-state clarity: actual 0.50, expected >= 0.70" in text
        assert "Vision alignment" not in text
        assert "Missing fields: successCriteria" in text

    def test_includes_options_and_documentation(self):
        text = generate_criteria_failure_feedback("strategic-alignment", self._result())

        assert "Options: [FIX] [SKIP VALIDATION] [ABORT WORKFLOW]" in text
        assert "Documentation: docs/checkpoints/strategic-alignment.md" in text

    def test_includes_checkpoint_hints(self):
        checkpoint = CheckpointConfig(
            checkpoint="strategic-alignment",
            feedback_on_failure=("Tie each goal to the vision",),
        )
        text = generate_criteria_failure_feedback(
            "strategic-alignment", self._result(), checkpoint
        )
        assert "How to fix:\n  - Tie each goal to the vision" in text

    def test_violations(self):
        result = ValidationResult(
            gate="axioma-validator",
            passed=False,
            violations=("riskMitigation: 0.30",),
            violations_count=1,
        )
        text = generate_criteria_failure_feedback("axioma-validator", result)
        assert "Violations (1):\n  - riskMitigation: 0.30" in text


class TestVetoFeedback:
    """Veto feedback names the breach and never offers a skip."""

    def _result(self) -> ValidationResult:
        return ValidationResult(
            gate="coherence-scan",
            passed=False,
            veto=True,
            veto_reason="TRUTHFULNESS_BELOW_THRESHOLD",
            recommendation=Recommendation.REJECT,
            vetoes=(
                VetoDetail(
                    veto_type="TRUTHFULNESS_BELOW_THRESHOLD",
                    actor="coder",
                    value=0.65,
                    threshold=0.70,
                ),
            ),
        )

    def test_veto_text(self):
        text = generate_veto_feedback("coherence-scan", self._result())

        assert text.startswith(
            "VETO: Coherence Scan checkpoint 'coherence-scan' rejected "
            "(TRUTHFULNESS_BELOW_THRESHOLD)"
        )
        assert "  - coder: 0.65 breached threshold 0.70" in text
        assert "Options: [FIX] [ABORT WORKFLOW]" in text
        assert "SKIP" not in text

    def test_veto_conditions_listed(self):
        checkpoint = CheckpointConfig(
            checkpoint="coherence-scan", veto_conditions=("truthfulness < 0.70",)
        )
        text = generate_veto_feedback("coherence-scan", self._result(), checkpoint)
        assert "Veto conditions:\n  - truthfulness < 0.70" in text

    def test_veto_without_details(self):
        result = ValidationResult(
            gate="g", passed=False, veto=True, veto_reason="CUSTOM_VETO"
        )
        assert "  - reason: CUSTOM_VETO" in generate_veto_feedback("g", result)


class TestRenderFeedback:
    """render_feedback picks the renderer and never alters the verdict."""

    def test_dispatch(self):
        passed = ValidationResult(gate="g", passed=True, score=9.0)
        failed = ValidationResult(gate="g", passed=False, score=3.0)
        vetoed = ValidationResult(gate="g", passed=False, veto=True)

        assert render_feedback(passed).startswith("PASSED")
        assert render_feedback(failed).startswith("VALIDATION FAILED")
        assert render_feedback(vetoed).startswith("VETO")

    def test_skips_and_errors_render_nothing(self):
        assert render_feedback(ValidationResult.skipped_result("g")) == ""
        assert render_feedback(ValidationResult.configuration_error("g", "x")) == ""

    def test_result_unchanged(self):
        result = ValidationResult(gate="g", passed=False, score=3.0)
        render_feedback(result)
        assert result == ValidationResult(gate="g", passed=False, score=3.0)
