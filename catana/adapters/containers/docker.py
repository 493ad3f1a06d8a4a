"""
Docker adapter — compose-based container launches.

Handles ``container_launch`` actions (the BloodHound stack). The
project is started detached so the batch can move on.
"""

from __future__ import annotations

import logging
from pathlib import Path

from catana.adapters.base import Adapter, CommandInvoker, ExecutionContext
from catana.core.models.action import ContainerLaunchAction, Invocation

logger = logging.getLogger(__name__)


def compose_arguments(action: ContainerLaunchAction) -> list[str]:
    args = ["compose", "-f", str(Path(action.compose_file).expanduser())]
    if action.project:
        args += ["-p", action.project]
    return args + ["up", "-d"]


class ContainerLaunchAdapter(Adapter):
    """Bring up a docker compose project."""

    def __init__(self, invoker: CommandInvoker):
        self._invoker = invoker

    @property
    def name(self) -> str:
        return "container_launch"

    def is_available(self) -> bool:
        return self._invoker.is_available("docker")

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        action: ContainerLaunchAction = context.action  # type: ignore[assignment]
        compose_file = Path(action.compose_file).expanduser()
        if not compose_file.is_file():
            return False, f"Compose file not found: {compose_file}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Invocation:
        action: ContainerLaunchAction = context.action  # type: ignore[assignment]
        logger.info("Starting compose project from %s", action.compose_file)
        return self._invoker.invoke("docker", compose_arguments(action), timeout=context.timeout)
