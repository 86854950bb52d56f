"""
Task-anatomy validator.

A structural check: every task must state its input, outcome, process and
success condition. It needs no mind artifacts, so it keeps running when the
workflow has fallen back to Generic mode.
"""

from collections.abc import Mapping
from typing import Any

from phasegate.domain.interfaces import ValidatorInterface
from phasegate.domain.models import (
    MAX_SCORE,
    CriterionResult,
    Recommendation,
    Severity,
    ValidationResult,
)

VALIDATOR_NAME = "task-anatomy"
REQUIRED_FIELDS = ("input", "outcome", "process", "success")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, Mapping | list | tuple):
        return not value
    return False


def _anatomy_sources(task: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    sources = [task]
    nested = task.get("taskAnatomy")
    if isinstance(nested, Mapping):
        sources.append(nested)
    custom = task.get("customFields")
    if isinstance(custom, Mapping) and isinstance(custom.get("taskAnatomy"), Mapping):
        sources.append(custom["taskAnatomy"])
    return sources


class TaskAnatomyValidator(ValidatorInterface):
    """Checks one task, or a ``tasks`` list, for the required anatomy fields."""

    name = VALIDATOR_NAME

    def __init__(
        self,
        required_fields: tuple[str, ...] = REQUIRED_FIELDS,
        invalid_report_limit: int = 5,
    ) -> None:
        self.required_fields = required_fields
        self.invalid_report_limit = invalid_report_limit

    def missing_fields(self, task: Mapping[str, Any]) -> tuple[str, ...]:
        sources = _anatomy_sources(task)
        return tuple(
            name
            for name in self.required_fields
            if all(_is_blank(source.get(name)) for source in sources)
        )

    def validate(
        self, artifact: Mapping[str, Any], threshold: float | None = None
    ) -> ValidationResult:
        tasks = artifact.get("tasks")
        if isinstance(tasks, list | tuple):
            return self._validate_batch(tasks)
        return self._validate_single(artifact)

    def _validate_single(self, task: Mapping[str, Any]) -> ValidationResult:
        missing = self.missing_fields(task)
        present = len(self.required_fields) - len(missing)
        passed = not missing
        return ValidationResult(
            gate=self.name,
            passed=passed,
            score=round(MAX_SCORE * present / len(self.required_fields), 2),
            recommendation=Recommendation.PROCEED if passed else Recommendation.REFINE,
            missing_fields=missing,
            severity=Severity.INFO if passed else Severity.WARNING,
            criteria=tuple(
                CriterionResult(
                    criterion=f"Task states its {name}",
                    passed=name not in missing,
                    actual="missing" if name in missing else "present",
                    expected="non-empty",
                )
                for name in self.required_fields
            ),
            feedback=(
                (f"Task anatomy incomplete: missing {', '.join(missing)}",)
                if missing
                else ()
            ),
        )

    def _validate_batch(self, tasks: list[Any] | tuple[Any, ...]) -> ValidationResult:
        invalid = []
        for index, task in enumerate(tasks):
            task_map = task if isinstance(task, Mapping) else {}
            missing = self.missing_fields(task_map)
            if missing:
                invalid.append(
                    {
                        "index": index,
                        "id": task_map.get("id", task_map.get("title", index)),
                        "missingFields": list(missing),
                    }
                )

        total = len(tasks)
        valid_count = total - len(invalid)
        passed = not invalid
        score = MAX_SCORE * valid_count / total if total else MAX_SCORE
        return ValidationResult(
            gate=self.name,
            passed=passed,
            score=round(score, 2),
            recommendation=Recommendation.PROCEED if passed else Recommendation.REFINE,
            severity=Severity.INFO if passed else Severity.WARNING,
            violations=tuple(
                f"task {item['id']}: missing {', '.join(item['missingFields'])}"
                for item in invalid[: self.invalid_report_limit]
            ),
            violations_count=len(invalid),
            criteria=(
                CriterionResult(
                    criterion="Tasks with complete anatomy",
                    passed=passed,
                    actual=valid_count,
                    expected=total,
                ),
            ),
            feedback=(
                (f"{len(invalid)} of {total} task(s) have incomplete anatomy",)
                if invalid
                else ()
            ),
            details={
                "validCount": valid_count,
                "invalidCount": len(invalid),
                "invalidTasks": invalid[: self.invalid_report_limit],
            },
        )
