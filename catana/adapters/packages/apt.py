"""
Package adapter — apt-get operations.

Handles ``package`` actions: refresh the package lists, upgrade the
installed set, or install named packages. Always non-interactive.
"""

from __future__ import annotations

import logging

from catana.adapters.base import Adapter, CommandInvoker, ExecutionContext
from catana.core.models.action import Invocation, PackageAction

logger = logging.getLogger(__name__)

APT = "apt-get"
_NONINTERACTIVE_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


def apt_arguments(action: PackageAction) -> list[str]:
    """Build the apt-get argument vector for a package action."""
    if action.operation == "update":
        return ["update"]
    if action.operation == "upgrade":
        return ["upgrade", "-y"]
    return ["install", "-y", *action.packages]


class PackageAdapter(Adapter):
    """Install, update and upgrade through apt-get."""

    def __init__(self, invoker: CommandInvoker):
        self._invoker = invoker

    @property
    def name(self) -> str:
        return "package"

    def is_available(self) -> bool:
        return self._invoker.is_available(APT)

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        action: PackageAction = context.action  # type: ignore[assignment]
        if action.operation == "install" and not action.packages:
            return False, "Missing required param: 'packages' for install"
        return True, ""

    def execute(self, context: ExecutionContext) -> Invocation:
        action: PackageAction = context.action  # type: ignore[assignment]
        logger.debug("apt-get %s %s", action.operation, " ".join(action.packages))
        return self._invoker.invoke(
            APT,
            apt_arguments(action),
            env=_NONINTERACTIVE_ENV,
            timeout=context.timeout,
        )
