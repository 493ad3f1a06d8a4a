"""
Batch executor — run a selection of steps and report.

Flow:
    ids → resolve in catalog → run each step → collect results
        → reconcile restarts once → report

One broken step never blocks the others: unknown ids and failed
actions become failed results and the batch moves on. Only a fatal
environment error (lost privilege, operator interrupt) stops the
batch; it is re-raised with the partial report attached.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime

from catana.core.engine.catalog import StepCatalog
from catana.core.engine.runner import StepRunner
from catana.core.errors import FatalEnvironmentError
from catana.core.models.result import BatchReport, StepResult
from catana.core.services.privilege import PrivilegeGuard
from catana.core.services.restarts import Reconciler

logger = logging.getLogger(__name__)


class BatchExecutor:
    """Runs batches of catalog steps strictly in the given order."""

    def __init__(
        self,
        catalog: StepCatalog,
        runner: StepRunner,
        reconciler: Reconciler | None = None,
        guard: PrivilegeGuard | None = None,
    ):
        self._catalog = catalog
        self._runner = runner
        self._reconciler = reconciler
        self._guard = guard

    def execute(self, step_ids: Sequence[str]) -> BatchReport:
        """Run ``step_ids`` in order and return the completed report.

        Raises:
            FatalEnvironmentError: The batch was aborted; ``.report``
                holds the results collected so far.
        """
        report = BatchReport(batch_id=generate_batch_id(), requested=list(step_ids))
        report.state = "running"
        restart_pending = False

        try:
            for step_id in step_ids:
                if self._guard is not None:
                    self._guard.check()

                step = self._catalog.get(step_id)
                if step is None:
                    logger.warning("✗ %s: unknown step", step_id)
                    report.results.append(StepResult.unknown_step(step_id))
                    continue

                result = self._runner.run(step)
                report.results.append(result)
                if step.restart_sensitive and result.outcome == "succeeded":
                    restart_pending = True

            if restart_pending:
                self._reconcile(report)
        except FatalEnvironmentError as e:
            self._abort(report, str(e), restart_pending)
            e.report = report
            raise
        except KeyboardInterrupt as e:
            self._abort(report, "interrupted by operator", restart_pending)
            raise FatalEnvironmentError("Interrupted by operator", report) from e

        report.state = "completed"
        report.ended_at = datetime.now(UTC).isoformat()
        logger.info(
            "Batch %s: %d/%d succeeded, %d skipped, %d failed",
            report.batch_id,
            report.succeeded,
            report.total,
            report.skipped,
            report.failed,
        )
        return report

    def _reconcile(self, report: BatchReport) -> None:
        if self._reconciler is None:
            report.needs_restart = True
            report.reconcile_message = "No restart reconciler configured"
            return

        try:
            outcome = self._reconciler.reconcile_restarts()
        except FatalEnvironmentError:
            raise
        except Exception as e:
            logger.error("Restart reconciliation failed: %s", e)
            report.reconciled = True
            report.needs_restart = True
            report.reconcile_message = f"Restart reconciliation failed: {e}"
            return

        report.reconciled = True
        report.needs_restart = not outcome.all_clear
        report.reconcile_message = outcome.message

    def _abort(self, report: BatchReport, reason: str, restart_pending: bool) -> None:
        remaining = len(report.requested) - len(report.results)
        logger.error("Batch aborted: %s (%d step(s) not run)", reason, remaining)
        report.aborted = True
        report.abort_reason = reason
        if restart_pending and not report.reconciled:
            report.needs_restart = True
        report.state = "completed"
        report.ended_at = datetime.now(UTC).isoformat()


def generate_batch_id() -> str:
    """Generate a unique batch ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"batch-{now}-{short}"
