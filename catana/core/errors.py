"""
Error taxonomy for the provisioning core.

Step-level problems (a failed action, an unknown step id) are never
exceptions: they are recorded as failed StepResults and the batch
moves on. The exceptions here are the conditions that cannot be
folded into a result.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catana.core.models.result import BatchReport


class ProbeError(Exception):
    """A presence probe could not determine whether its target exists.

    Distinct from "not present", which is a plain False. Raised for
    permission errors, unreadable files and malformed probe patterns.
    """


class CatalogError(Exception):
    """The step catalog is misconfigured (duplicate id, bad reference, ...)."""


class FatalEnvironmentError(Exception):
    """An unrecoverable environment condition aborted the batch.

    Carries the partial report built up to the point of failure so
    callers can still render what ran.
    """

    def __init__(self, message: str, report: BatchReport | None = None):
        super().__init__(message)
        self.report = report
