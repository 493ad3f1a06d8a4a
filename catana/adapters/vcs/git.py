"""
Git adapter — repository checkouts.

Handles ``clone_repo`` actions (e.g. PEASS-ng into /opt). Uses the git
CLI through the command invoker.
"""

from __future__ import annotations

import logging
from pathlib import Path

from catana.adapters.base import Adapter, CommandInvoker, ExecutionContext
from catana.core.models.action import CloneRepoAction, Invocation

logger = logging.getLogger(__name__)


class GitCloneAdapter(Adapter):
    """Clone a repository into a destination directory."""

    def __init__(self, invoker: CommandInvoker):
        self._invoker = invoker

    @property
    def name(self) -> str:
        return "clone_repo"

    def is_available(self) -> bool:
        return self._invoker.is_available("git")

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        action: CloneRepoAction = context.action  # type: ignore[assignment]
        dest = Path(action.dest).expanduser()
        if dest.is_dir() and any(dest.iterdir()):
            return False, f"Destination is not empty: {dest}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Invocation:
        action: CloneRepoAction = context.action  # type: ignore[assignment]
        args = ["clone"]
        if action.depth:
            args += ["--depth", str(action.depth)]
        args += [action.url, str(Path(action.dest).expanduser())]
        return self._invoker.invoke("git", args, timeout=context.timeout)
