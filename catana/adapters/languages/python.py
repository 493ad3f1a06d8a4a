"""
Python adapter — virtual environments and pip installs.

Handles ``venv_create`` (create the tool venv, optionally upgrading
its pip) and ``pip_install`` (install packages into an existing venv).
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from catana.adapters.base import Adapter, CommandInvoker, ExecutionContext
from catana.core.models.action import Invocation, PipInstallAction, VenvCreateAction

logger = logging.getLogger(__name__)


def _python_cmd() -> str:
    """Resolve the Python interpreter command."""
    if shutil.which("python3"):
        return "python3"
    return "python"


def venv_pip(venv: str) -> str:
    """Path of the pip executable inside a virtualenv."""
    return str(Path(venv).expanduser() / "bin" / "pip")


class VenvAdapter(Adapter):
    """Create a virtualenv and bring its pip up to date."""

    def __init__(self, invoker: CommandInvoker):
        self._invoker = invoker

    @property
    def name(self) -> str:
        return "venv_create"

    def is_available(self) -> bool:
        return self._invoker.is_available("python3") or self._invoker.is_available("python")

    def execute(self, context: ExecutionContext) -> Invocation:
        action: VenvCreateAction = context.action  # type: ignore[assignment]
        path = str(Path(action.path).expanduser())

        created = self._invoker.invoke(_python_cmd(), ["-m", "venv", path], timeout=context.timeout)
        if not created.ok or not action.upgrade_pip:
            return created

        upgraded = self._invoker.invoke(
            venv_pip(path),
            ["install", "--upgrade", "pip"],
            timeout=context.timeout,
        )
        if not upgraded.ok:
            return upgraded
        return Invocation.success(
            output=f"Created virtualenv at {path}",
            command=created.command,
            duration_ms=created.duration_ms + upgraded.duration_ms,
        )


class PipAdapter(Adapter):
    """Install packages into an existing virtualenv."""

    def __init__(self, invoker: CommandInvoker):
        self._invoker = invoker

    @property
    def name(self) -> str:
        return "pip_install"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        action: PipInstallAction = context.action  # type: ignore[assignment]
        if not Path(venv_pip(action.venv)).exists():
            return False, f"No virtualenv at {action.venv} (create it first)"
        return True, ""

    def execute(self, context: ExecutionContext) -> Invocation:
        action: PipInstallAction = context.action  # type: ignore[assignment]
        return self._invoker.invoke(
            venv_pip(action.venv),
            ["install", "--upgrade", *action.packages],
            timeout=context.timeout,
        )
