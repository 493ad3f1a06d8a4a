"""
Privilege guard — the tool needs root for apt, /etc and /opt.

The guard is consulted before the batch starts and again before every
step. Losing root mid-run is an environment failure the batch cannot
recover from, so it raises FatalEnvironmentError.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable

from catana.core.errors import FatalEnvironmentError

logger = logging.getLogger(__name__)


class PrivilegeGuard:
    """Fail fast when the process no longer runs as root.

    Args:
        require_root: When False the guard never objects.
        geteuid: Injected for tests; defaults to ``os.geteuid``.
    """

    def __init__(
        self,
        require_root: bool = True,
        geteuid: Callable[[], int] | None = None,
    ):
        self._require_root = require_root
        self._geteuid = geteuid or os.geteuid

    @property
    def required(self) -> bool:
        return self._require_root

    def has_privilege(self) -> bool:
        return not self._require_root or self._geteuid() == 0

    def check(self) -> None:
        """Raise FatalEnvironmentError if required privileges are missing."""
        if not self.has_privilege():
            logger.error("Root privileges required (euid=%d)", self._geteuid())
            raise FatalEnvironmentError("Please run as root or via sudo.")
