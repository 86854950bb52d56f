"""Ready-made phase executors and recovery policies."""

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from phasegate.domain.interfaces import PhaseExecutorInterface, RecoveryPolicyInterface
from phasegate.domain.models import AgentContext, PhaseResult, RecoveryAction


class CallbackExecutor(PhaseExecutorInterface):
    """Wraps a plain function ``(AgentContext) -> output``."""

    def __init__(self, fn: Callable[[AgentContext], Mapping[str, Any]]) -> None:
        self._fn = fn

    def execute(self, context: AgentContext) -> Mapping[str, Any]:
        return self._fn(context)


class ScriptedExecutor(PhaseExecutorInterface):
    """
    Returns predefined outputs per phase.

    A phase may map to one output or to a sequence consumed one per attempt;
    the last entry repeats once the sequence is exhausted.
    """

    def __init__(
        self, outputs: Mapping[str, Mapping[str, Any] | Sequence[Mapping[str, Any]]]
    ) -> None:
        self._outputs = dict(outputs)
        self.calls: list[AgentContext] = []

    def execute(self, context: AgentContext) -> Mapping[str, Any]:
        self.calls.append(context)
        planned = self._outputs.get(context.phase.name, {})
        if isinstance(planned, Mapping):
            return planned
        if not planned:
            return {}
        attempt = sum(1 for c in self.calls if c.phase.name == context.phase.name)
        return planned[min(attempt, len(planned)) - 1]


class StaticRecoveryPolicy(RecoveryPolicyInterface):
    """Always answers with the same action."""

    def __init__(self, action: RecoveryAction) -> None:
        self.action = action

    def choose(self, result: PhaseResult) -> RecoveryAction:
        return self.action


class ScriptedRecoveryPolicy(RecoveryPolicyInterface):
    """Answers from a list of actions, then aborts."""

    def __init__(self, actions: Iterable[RecoveryAction]) -> None:
        self._actions = list(actions)
        self.seen: list[PhaseResult] = []

    def choose(self, result: PhaseResult) -> RecoveryAction:
        self.seen.append(result)
        if self._actions:
            return self._actions.pop(0)
        return RecoveryAction.ABORT_WORKFLOW
