"""
Shell command adapter — the subprocess boundary.

SubprocessInvoker is the single place where ``subprocess.run`` is
called. Every other adapter that needs an external program goes
through an invoker, so tests can swap it for a recording double.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import time
from collections.abc import Mapping, Sequence

from catana.adapters.base import Adapter, CommandInvoker, ExecutionContext
from catana.core.models.action import Invocation

logger = logging.getLogger(__name__)

# Captured output is trimmed to the tail; apt and pip are chatty.
_OUTPUT_TAIL = 4000

EXIT_TIMEOUT = 124
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127


def _tail(text: str | None) -> str:
    if not text:
        return ""
    return text.strip()[-_OUTPUT_TAIL:]


class SubprocessInvoker(CommandInvoker):
    """Run commands with ``subprocess.run`` and capture their output."""

    def __init__(self, default_timeout: int = 1800):
        self._default_timeout = default_timeout

    def is_available(self, command: str) -> bool:
        return shutil.which(command) is not None

    def invoke(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        timeout: int | None = None,
    ) -> Invocation:
        argv = [command, *args]
        display = shlex.join(argv)
        timeout = timeout or self._default_timeout

        full_env = None
        if env:
            full_env = os.environ.copy()
            full_env.update(env)

        logger.debug("Executing: %s (cwd=%s)", display, cwd)
        start = time.monotonic()

        try:
            result = subprocess.run(
                argv,
                cwd=cwd,
                env=full_env,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return Invocation.failure(
                EXIT_TIMEOUT,
                f"Command timed out after {timeout}s",
                command=display,
            )
        except FileNotFoundError:
            return Invocation.failure(
                EXIT_NOT_FOUND,
                f"Command not found: {command}",
                command=display,
            )
        except PermissionError as e:
            return Invocation.failure(EXIT_NOT_EXECUTABLE, f"Permission denied: {e}", command=display)
        except OSError as e:
            return Invocation.failure(1, f"Command execution error: {e}", command=display)
        except ValueError as e:
            return Invocation.failure(1, f"Invalid command: {e}", command=display)

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = _tail(result.stdout)
        stderr = _tail(result.stderr)

        if result.returncode == 0:
            return Invocation.success(
                output=stdout,
                command=display,
                duration_ms=elapsed_ms,
                metadata={"stderr": stderr} if stderr else {},
            )

        logger.debug("%s exited with %d", display, result.returncode)
        return Invocation.failure(
            result.returncode,
            stderr or stdout or f"Command exited with code {result.returncode}",
            command=display,
            duration_ms=elapsed_ms,
        )


class ShellAdapter(Adapter):
    """Run a ``shell`` action's command string through ``sh -c``."""

    def __init__(self, invoker: CommandInvoker):
        self._invoker = invoker

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return self._invoker.is_available("sh")

    def execute(self, context: ExecutionContext) -> Invocation:
        command = context.action.command  # type: ignore[union-attr]
        return self._invoker.invoke("sh", ["-c", command], timeout=context.timeout)
