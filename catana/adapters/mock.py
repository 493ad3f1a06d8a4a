"""
Mock adapter and recording invoker — test doubles for the action layer.

MockAdapter stands in for any action kind without touching the system.
RecordingInvoker stands in for the subprocess boundary and records
every command it is asked to run. MockReconciler stands in for the
restart-reconciliation collaborator.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

from catana.adapters.base import Adapter, CommandInvoker, ExecutionContext
from catana.core.models.action import Invocation
from catana.core.models.result import ReconcileResult
from catana.core.services.restarts import Reconciler


class MockAdapter(Adapter):
    """Universal mock adapter for testing.

    By default, returns success for everything. Can be configured with
    custom responses per step id, and with a side effect that runs on
    every call (e.g. to create the file a precondition looks for).
    """

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
        side_effect: Callable[[ExecutionContext], None] | None = None,
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._side_effect = side_effect
        self._responses: dict[str, Invocation] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_response(self, step_id: str, invocation: Invocation) -> None:
        """Set a custom response for a specific step id."""
        self._responses[step_id] = invocation

    def set_failure(self, step_id: str, exit_code: int = 1, output: str = "Mock failure") -> None:
        """Configure a specific step to fail."""
        self._responses[step_id] = Invocation.failure(exit_code, output)

    def execute(self, context: ExecutionContext) -> Invocation:
        self._call_log.append(context)
        if self._side_effect is not None:
            self._side_effect(context)

        if context.step_id in self._responses:
            return self._responses[context.step_id]

        return Invocation.success(output=self._default_output, metadata={"mock": True})

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()


class RecordingInvoker(CommandInvoker):
    """Command invoker that records calls instead of running them.

    Responses are keyed by command name; anything unconfigured
    succeeds with empty output.
    """

    def __init__(self, available: bool = True):
        self._available = available
        self._responses: dict[str, Invocation] = {}
        self.calls: list[tuple[str, list[str]]] = []
        self.envs: list[dict[str, str]] = []

    def set_response(self, command: str, invocation: Invocation) -> None:
        self._responses[command] = invocation

    def is_available(self, command: str) -> bool:
        return self._available

    def invoke(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        timeout: int | None = None,
    ) -> Invocation:
        self.calls.append((command, list(args)))
        self.envs.append(dict(env or {}))
        return self._responses.get(command, Invocation.success(command=command))


class MockReconciler(Reconciler):
    """Reconciler that counts calls and reports a fixed outcome."""

    def __init__(self, all_clear: bool = True, message: str = "[mock] restarts reconciled"):
        self._result = ReconcileResult(all_clear=all_clear, message=message)
        self.call_count = 0

    def reconcile_restarts(self) -> ReconcileResult:
        self.call_count += 1
        return self._result
