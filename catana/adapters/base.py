"""
Adapter base — the protocol contract between the step runner and the system.

Two seams live here:

* ``CommandInvoker`` — run one external command, return its exit status
  and captured output. Never raises for a non-zero exit.
* ``Adapter`` — carry out one kind of step action (package install,
  file patch, clone, ...), usually through a CommandInvoker.

The runner only talks to adapters through the registry, never to
subprocess directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field

from catana.core.config.loader import ProvisionConfig
from catana.core.models.action import Action, Invocation


class ExecutionContext(BaseModel):
    """Everything an adapter needs to execute one step's action."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    step_id: str
    action: Action
    config: ProvisionConfig = Field(default_factory=ProvisionConfig)

    @property
    def timeout(self) -> int:
        return self.config.command_timeout


class CommandInvoker(ABC):
    """Runs external commands and reports their terminal status."""

    @abstractmethod
    def invoke(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        timeout: int | None = None,
    ) -> Invocation:
        """Run ``command`` with ``args`` and wait for it to exit.

        MUST return the exit status faithfully and MUST NOT raise for
        a non-zero exit, a missing binary or a timeout.
        """

    def is_available(self, command: str) -> bool:
        """Whether ``command`` can be found by this invoker."""
        return True


class Adapter(ABC):
    """Abstract base class for action adapters.

    Adapters perform external side effects and return Invocations.
    They NEVER raise for ordinary failures; the only exception allowed
    out is FatalEnvironmentError.

    To support a new action kind:
        1. Add the variant to catana.core.models.action
        2. Subclass Adapter with ``name`` equal to the variant's kind
        3. Register it in build_default_registry()
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The action kind handled (e.g. 'package', 'file_patch')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying tool exists. Fast, never raises."""

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check the action can be attempted.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """
        return True, ""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Invocation:
        """Carry out the action and report its terminal status."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
