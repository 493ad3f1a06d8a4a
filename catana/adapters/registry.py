"""
Adapter registry — central dispatch for step actions.

Each action kind maps to exactly one adapter. The step runner hands
every action to the registry, which validates it, runs it through the
matching adapter and folds any unexpected error into an Invocation.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from catana.adapters.base import Adapter, CommandInvoker, ExecutionContext
from catana.core.config.loader import ProvisionConfig
from catana.core.errors import FatalEnvironmentError
from catana.core.models.action import Action, Invocation

logger = logging.getLogger(__name__)

EXIT_NO_ADAPTER = 127
EXIT_INVALID = 2


class AdapterRegistry:
    """Action adapters keyed by the kind they handle.

    In mock mode every action succeeds without reaching an adapter.
    """

    def __init__(self, mock_mode: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self._mock_mode = mock_mode

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    def register(self, adapter: Adapter) -> None:
        name = adapter.name
        if name in self._adapters:
            logger.warning("Overwriting existing adapter: %s", name)
        self._adapters[name] = adapter
        logger.debug("Registered adapter: %s", name)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def list_adapters(self) -> list[str]:
        return list(self._adapters.keys())

    def adapter_status(self) -> dict[str, dict[str, Any]]:
        """Availability of every registered adapter, by action kind."""
        return {
            kind: {
                "name": kind,
                "available": _probe_availability(adapter),
                "type": type(adapter).__name__,
            }
            for kind, adapter in self._adapters.items()
        }

    def execute(
        self,
        step_id: str,
        action: Action,
        config: ProvisionConfig | None = None,
    ) -> Invocation:
        """Execute one action through the adapter for its kind.

        Returns an Invocation and never raises, except for
        FatalEnvironmentError which must reach the batch executor.
        """
        start_time = time.monotonic()

        if self._mock_mode:
            return Invocation.success(
                output=f"[mock] {action.summary()}",
                command=action.summary(),
                metadata={"mock": True},
            )

        adapter = self._adapters.get(action.kind)
        if adapter is None:
            return Invocation.failure(
                EXIT_NO_ADAPTER,
                f"No adapter registered for '{action.kind}'",
                command=action.summary(),
            )

        context = ExecutionContext(
            step_id=step_id,
            action=action,
            config=config or ProvisionConfig(),
        )

        try:
            is_valid, error_msg = adapter.validate(context)
        except FatalEnvironmentError:
            raise
        except Exception as e:
            return Invocation.failure(EXIT_INVALID, f"Validation error: {e}", command=action.summary())
        if not is_valid:
            return Invocation.failure(
                EXIT_INVALID,
                f"Validation failed: {error_msg}",
                command=action.summary(),
            )

        try:
            invocation = adapter.execute(context)
        except FatalEnvironmentError:
            raise
        except Exception as e:
            logger.error("Adapter %s raised during execution: %s", action.kind, e)
            invocation = Invocation.failure(1, f"Unexpected error: {e}", command=action.summary())

        if not invocation.duration_ms:
            invocation.duration_ms = int((time.monotonic() - start_time) * 1000)
        return invocation


def build_default_registry(
    invoker: CommandInvoker | None = None,
    mock_mode: bool = False,
    default_timeout: int = 1800,
) -> AdapterRegistry:
    """Registry wired with one adapter per action kind."""
    from catana.adapters.containers.docker import ContainerLaunchAdapter
    from catana.adapters.languages.python import PipAdapter, VenvAdapter
    from catana.adapters.packages.apt import PackageAdapter
    from catana.adapters.shell.command import ShellAdapter, SubprocessInvoker
    from catana.adapters.shell.filesystem import FilePatchAdapter
    from catana.adapters.vcs.git import GitCloneAdapter

    if invoker is None:
        invoker = SubprocessInvoker(default_timeout=default_timeout)

    registry = AdapterRegistry(mock_mode=mock_mode)
    registry.register(PackageAdapter(invoker))
    registry.register(ShellAdapter(invoker))
    registry.register(FilePatchAdapter())
    registry.register(GitCloneAdapter(invoker))
    registry.register(ContainerLaunchAdapter(invoker))
    registry.register(VenvAdapter(invoker))
    registry.register(PipAdapter(invoker))
    return registry


def _probe_availability(adapter: Adapter) -> bool:
    try:
        return adapter.is_available()
    except Exception as e:
        logger.debug("%r availability check failed: %s", adapter, e)
        return False
