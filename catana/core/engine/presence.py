"""
Presence checker — read-only probes for "is this already done?".

Every step precondition is evaluated here. Probes only inspect the
local machine (PATH, filesystem, /proc) and never change it.

Absence is a normal ``False``. Only a probe that genuinely cannot
answer (permission denied, unreadable file, malformed pattern) raises
ProbeError, and the runner treats that as fail-closed.
"""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path

from catana.core.errors import ProbeError
from catana.core.models.step import Probe

logger = logging.getLogger(__name__)


class PresenceChecker:
    """Evaluate Probe trees against the local system.

    Args:
        path: Override for the PATH used by ``binary_on_path``.
        proc_root: Root of the process table, ``/proc`` by default.
    """

    def __init__(self, path: str | None = None, proc_root: Path = Path("/proc")):
        self._path = path
        self._proc_root = proc_root

    def check(self, probe: Probe) -> bool:
        """Return True if the probed target state already exists.

        Raises:
            ProbeError: If presence cannot be determined.
        """
        if probe.kind == "any_of":
            result = any(self.check(p) for p in probe.probes)
        elif probe.kind == "all_of":
            result = all(self.check(p) for p in probe.probes)
        elif probe.kind == "binary_on_path":
            result = self._binary_on_path(probe.target)
        elif probe.kind == "file_exists":
            result = self._stat_kind(probe.target, want_dir=False)
        elif probe.kind == "directory_exists":
            result = self._stat_kind(probe.target, want_dir=True)
        elif probe.kind == "file_contains":
            result = self._file_contains(probe.target, probe.pattern)
        elif probe.kind == "process_or_session_active":
            result = self._process_active(probe.target)
        else:
            raise ProbeError(f"Unsupported probe kind: {probe.kind}")

        if probe.negate:
            result = not result
        logger.debug("probe %s → %s", probe.describe(), result)
        return result

    # ── Leaf probes ─────────────────────────────────────────────

    def _binary_on_path(self, name: str) -> bool:
        return shutil.which(name, path=self._path) is not None

    def _stat_kind(self, raw_path: str, want_dir: bool) -> bool:
        path = Path(raw_path).expanduser()
        try:
            path.stat()
        except FileNotFoundError:
            return False
        except NotADirectoryError:
            return False
        except PermissionError as e:
            raise ProbeError(f"Permission denied inspecting {path}: {e}") from e
        except OSError as e:
            raise ProbeError(f"Cannot inspect {path}: {e}") from e
        return path.is_dir() if want_dir else path.is_file()

    def _file_contains(self, raw_path: str, pattern: str) -> bool:
        try:
            regex = re.compile(pattern)
        except re.error as e:
            raise ProbeError(f"Invalid pattern /{pattern}/: {e}") from e

        path = Path(raw_path).expanduser()
        try:
            with path.open("r", encoding="utf-8", errors="replace") as f:
                return any(regex.search(line) for line in f)
        except FileNotFoundError:
            return False
        except IsADirectoryError as e:
            raise ProbeError(f"{path} is a directory") from e
        except PermissionError as e:
            raise ProbeError(f"Permission denied reading {path}: {e}") from e
        except OSError as e:
            raise ProbeError(f"Cannot read {path}: {e}") from e

    def _process_active(self, name: str) -> bool:
        """Look for a running process whose command name matches.

        Without a readable process table presence cannot be determined;
        that is reported as "not present" so the action gets attempted.
        """
        if not self._proc_root.is_dir():
            logger.debug("%s unavailable, assuming '%s' is not running", self._proc_root, name)
            return False

        try:
            entries = list(self._proc_root.iterdir())
        except OSError as e:
            logger.debug("Cannot list %s: %s", self._proc_root, e)
            return False

        for entry in entries:
            if not entry.name.isdigit():
                continue
            try:
                comm = (entry / "comm").read_text(encoding="utf-8", errors="replace").strip()
            except OSError:
                # processes exit between listing and reading
                continue
            # comm is truncated to 15 characters
            if comm == name or (len(comm) == 15 and name.startswith(comm)):
                return True
        return False
