"""
Restart reconciliation — end-of-batch service/library restarts.

Package upgrades, new daemons and shell-environment edits can leave
services running against stale libraries. After a batch in which any
restart-sensitive step succeeded, the executor calls a Reconciler
exactly once.

NeedrestartReconciler delegates to the ``needrestart`` utility:
    1. install it when missing
    2. drop in a config that restarts automatically without prompting
    3. run ``needrestart -q -r a``; exit 0 means everything was handled
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from catana.core.models.result import ReconcileResult

if TYPE_CHECKING:
    from catana.adapters.base import CommandInvoker

logger = logging.getLogger(__name__)

NEEDRESTART_CONF = """\
$nrconf{restart} = 'a';
$nrconf{restart_notify} = 0;
"""

REBOOT_HINT = "Some updates require a full reboot. Please reboot when convenient."


class Reconciler(ABC):
    """Collaborator that clears pending restarts after a batch."""

    @abstractmethod
    def reconcile_restarts(self) -> ReconcileResult:
        """Restart what can be restarted; report whether anything remains."""


class NeedrestartReconciler(Reconciler):
    """Reconcile restarts through needrestart."""

    def __init__(
        self,
        invoker: CommandInvoker,
        conf_path: Path = Path("/etc/needrestart/conf.d/catana.conf"),
        timeout: int = 600,
    ):
        self._invoker = invoker
        self._conf_path = conf_path
        self._timeout = timeout

    def reconcile_restarts(self) -> ReconcileResult:
        if not self._invoker.is_available("needrestart"):
            logger.info("Installing needrestart to manage restarts")
            installed = self._invoker.invoke(
                "apt-get",
                ["install", "-y", "needrestart"],
                env={"DEBIAN_FRONTEND": "noninteractive"},
                timeout=self._timeout,
            )
            if not installed.ok:
                return ReconcileResult(
                    all_clear=False,
                    message=f"needrestart could not be installed: {installed.output}",
                )

        try:
            self._write_conf()
        except OSError as e:
            # needrestart still runs, it just may fall back to its own defaults
            logger.warning("Cannot write %s: %s", self._conf_path, e)

        logger.info("Checking for services or libraries to restart")
        checked = self._invoker.invoke("needrestart", ["-q", "-r", "a"], timeout=self._timeout)
        if not checked.ok:
            return ReconcileResult(all_clear=False, message=REBOOT_HINT)
        return ReconcileResult(
            all_clear=True,
            message="All services have been restarted successfully.",
        )

    def _write_conf(self) -> None:
        self._conf_path.parent.mkdir(parents=True, exist_ok=True)
        self._conf_path.write_text(NEEDRESTART_CONF, encoding="utf-8")


def request_reboot(invoker: CommandInvoker) -> bool:
    """Ask the system to reboot. Returns whether the request was accepted."""
    result = invoker.invoke("reboot", [])
    if not result.ok:
        logger.error("Reboot request failed: %s", result.output)
    return result.ok
