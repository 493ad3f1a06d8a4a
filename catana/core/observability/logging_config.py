"""
Logging configuration — one call at CLI start-up.

Every module does ``logger = logging.getLogger(__name__)`` and inherits
what is set up here. Step progress is logged at INFO, so ``-v`` turns
the CLI into a running commentary of probes and actions.

Console level precedence:
    --debug / --verbose / --quiet  >  CATANA_LOG_LEVEL  >  WARNING

A full-detail log file can be added with CATANA_LOG_FILE (and its own
level with CATANA_LOG_FILE_LEVEL), useful for long unattended batches.
"""

from __future__ import annotations

import logging
import os
import sys

LEVEL_ENV_VAR = "CATANA_LOG_LEVEL"
FILE_ENV_VAR = "CATANA_LOG_FILE"
FILE_LEVEL_ENV_VAR = "CATANA_LOG_FILE_LEVEL"

# (threshold, format, datefmt): the first threshold >= level wins
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s %(message)s", "%H:%M:%S"),
)
_FMT_PLAIN = "%(message)s"

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


def resolve_level(verbose: bool = False, quiet: bool = False, debug: bool = False) -> str:
    """Pick the console level name from CLI flags and the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(LEVEL_ENV_VAR, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger for the whole process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of an additional log file.
        log_file_level: Level for the file; defaults to ``level``.
    """
    console_level = parse_level(level)

    fmt, datefmt = _FMT_PLAIN, None
    for threshold, candidate_fmt, candidate_datefmt in _CONSOLE_FORMATS:
        if console_level <= threshold:
            fmt, datefmt = candidate_fmt, candidate_datefmt
            break

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = parse_level(log_file_level) if log_file_level else console_level
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(file_handler)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
    logging.raiseExceptions = False


def setup_from_environment(level: str) -> None:
    """setup_logging() with the file options taken from the environment."""
    setup_logging(
        level=level,
        log_file=os.environ.get(FILE_ENV_VAR),
        log_file_level=os.environ.get(FILE_LEVEL_ENV_VAR),
    )


def parse_level(level: str | None) -> int:
    """Convert a level name to its numeric constant (WARNING if unknown)."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
