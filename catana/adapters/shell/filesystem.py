"""
Filesystem adapter — idempotent config-file patches.

Handles ``file_patch`` actions: append a block of lines to a file
unless a pattern already matches it (GOPATH in ~/.bashrc, Samba
protocol bounds in smb.conf). The file and its parent directory are
created when missing.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from catana.adapters.base import Adapter, ExecutionContext
from catana.adapters.shell.command import EXIT_NOT_EXECUTABLE
from catana.core.models.action import FilePatchAction, Invocation

logger = logging.getLogger(__name__)


class FilePatchAdapter(Adapter):
    """Append-if-missing file edits with an Invocation result."""

    @property
    def name(self) -> str:
        return "file_patch"

    def is_available(self) -> bool:
        return True  # filesystem is always available

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        try:
            re.compile(context.action.pattern)  # type: ignore[union-attr]
        except re.error as e:
            return False, f"Invalid pattern: {e}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Invocation:
        action: FilePatchAction = context.action  # type: ignore[assignment]
        target = Path(action.path).expanduser()

        try:
            existing = target.read_text(encoding="utf-8") if target.is_file() else ""
            if re.search(action.pattern, existing, re.MULTILINE):
                return Invocation.success(
                    output=f"{target} already matches /{action.pattern}/",
                    command=action.summary(),
                )

            block = "\n".join(action.lines) + "\n"
            if existing and not existing.endswith("\n"):
                block = "\n" + block

            target.parent.mkdir(parents=True, exist_ok=True)
            with target.open("a", encoding="utf-8") as f:
                f.write(block)
        except PermissionError as e:
            return Invocation.failure(
                EXIT_NOT_EXECUTABLE,
                f"Permission denied: {e}",
                command=action.summary(),
            )
        except OSError as e:
            return Invocation.failure(1, f"Filesystem error: {e}", command=action.summary())

        logger.debug("Appended %d line(s) to %s", len(action.lines), target)
        return Invocation.success(
            output=f"Appended {len(action.lines)} line(s) to {target}",
            command=action.summary(),
        )
