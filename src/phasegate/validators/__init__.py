"""
Named validators dispatched by checkpoints that set ``validator``.

- axioma-validator: weighted quality dimensions (needs the mind bundle)
- task-anatomy: structural completeness (runs in every mode)
"""

from phasegate.domain.interfaces import ValidatorInterface
from phasegate.domain.models import AxiomaPolicy
from phasegate.validators.axioma import (
    DEFAULT_DIMENSIONS,
    DEFAULT_POLICY,
    AxiomaValidator,
)
from phasegate.validators.task_anatomy import REQUIRED_FIELDS, TaskAnatomyValidator

# validators that need no mind artifacts
STRUCTURAL_VALIDATORS = frozenset({TaskAnatomyValidator.name})
AXIOMA_VALIDATORS = frozenset({AxiomaValidator.name})


def build_validators(
    policy: AxiomaPolicy | None = None,
    threshold: float = 7.0,
    epsilon: float = 0.005,
) -> dict[str, ValidatorInterface]:
    """
    Validator table for a gate engine.

    Args:
        policy: Axioma policy from the mind bundle; None omits the axioma validator
        threshold: Default pass bar for scored validators
        epsilon: Floating-point allowance at the threshold
    """
    validators: dict[str, ValidatorInterface] = {
        TaskAnatomyValidator.name: TaskAnatomyValidator(),
    }
    if policy is not None:
        validators[AxiomaValidator.name] = AxiomaValidator(
            policy, threshold=threshold, epsilon=epsilon
        )
    return validators


__all__ = [
    "AxiomaValidator",
    "TaskAnatomyValidator",
    "DEFAULT_DIMENSIONS",
    "DEFAULT_POLICY",
    "REQUIRED_FIELDS",
    "STRUCTURAL_VALIDATORS",
    "AXIOMA_VALIDATORS",
    "build_validators",
]
