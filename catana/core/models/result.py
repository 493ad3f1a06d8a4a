"""
StepResult and BatchReport — what a batch run reports back.

A StepResult is produced once per step attempt and never changes.
The BatchReport collects them in execution order together with the
end-of-batch restart reconciliation outcome.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from catana.core.models.action import Invocation
from catana.core.models.step import Step

Outcome = Literal["skipped", "succeeded", "failed"]
ErrorKind = Literal["action_failed", "precondition_unknown", "unknown_step"]
BatchState = Literal["pending", "running", "completed"]

UNKNOWN_STEP_MESSAGE = "unknown step"


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class StepResult(BaseModel):
    """Outcome of attempting one step.

    ``exit_code`` is set whenever the action was invoked. A failure
    whose action never ran (unknown id, undeterminable precondition)
    has ``exit_code=None`` and a distinguishing ``error_kind``.
    """

    model_config = ConfigDict(frozen=True)

    step_id: str
    description: str = ""
    outcome: Outcome
    exit_code: int | None = None
    message: str = ""
    error_kind: ErrorKind | None = None
    restart_sensitive: bool = False
    verified: bool | None = None     # postcondition re-probe, None = not checked
    duration_ms: int = 0
    finished_at: str = Field(default_factory=_now_iso)

    @property
    def ok(self) -> bool:
        return self.outcome != "failed"

    @property
    def failed(self) -> bool:
        return self.outcome == "failed"

    @classmethod
    def skipped(cls, step: Step, message: str = "already satisfied") -> StepResult:
        return cls(
            step_id=step.id,
            description=step.description,
            outcome="skipped",
            message=message,
            restart_sensitive=step.restart_sensitive,
        )

    @classmethod
    def from_invocation(
        cls,
        step: Step,
        invocation: Invocation,
        verified: bool | None = None,
    ) -> StepResult:
        if invocation.ok:
            message = invocation.output
            if verified is False:
                message = "completed, but the precondition is still unmet"
            return cls(
                step_id=step.id,
                description=step.description,
                outcome="succeeded",
                exit_code=invocation.exit_code,
                message=message,
                restart_sensitive=step.restart_sensitive,
                verified=verified,
                duration_ms=invocation.duration_ms,
            )
        return cls(
            step_id=step.id,
            description=step.description,
            outcome="failed",
            exit_code=invocation.exit_code,
            message=invocation.output or f"exited with code {invocation.exit_code}",
            error_kind="action_failed",
            restart_sensitive=step.restart_sensitive,
            duration_ms=invocation.duration_ms,
        )

    @classmethod
    def precondition_unknown(cls, step: Step, error: str) -> StepResult:
        return cls(
            step_id=step.id,
            description=step.description,
            outcome="failed",
            message=f"precondition could not be evaluated: {error}",
            error_kind="precondition_unknown",
            restart_sensitive=step.restart_sensitive,
        )

    @classmethod
    def unknown_step(cls, step_id: str) -> StepResult:
        return cls(
            step_id=step_id,
            outcome="failed",
            message=UNKNOWN_STEP_MESSAGE,
            error_kind="unknown_step",
        )


class ReconcileResult(BaseModel):
    """What the restart-reconciliation collaborator reports."""

    all_clear: bool
    message: str = ""


@dataclass
class BatchReport:
    """Ordered results of one batch plus restart bookkeeping."""

    batch_id: str = ""
    requested: list[str] = field(default_factory=list)
    results: list[StepResult] = field(default_factory=list)
    state: BatchState = "pending"
    needs_restart: bool = False
    reconciled: bool = False
    reconcile_message: str = ""
    aborted: bool = False
    abort_reason: str = ""
    started_at: str = field(default_factory=_now_iso)
    ended_at: str = ""

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.outcome == "succeeded")

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.failed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.outcome == "skipped")

    @property
    def any_failed(self) -> bool:
        return self.failed > 0

    @property
    def status(self) -> str:
        if self.aborted:
            return "aborted"
        if self.failed == 0:
            return "ok"
        if self.failed < self.total:
            return "partial"
        return "failed"

    @property
    def exit_code(self) -> int:
        """CLI exit code: 0 clean, 1 some steps failed, 2 aborted."""
        if self.aborted:
            return 2
        return 1 if self.any_failed else 0

    def to_dict(self) -> dict:
        return {
            "batch_id": self.batch_id,
            "status": self.status,
            "state": self.state,
            "requested": list(self.requested),
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "any_failed": self.any_failed,
            "needs_restart": self.needs_restart,
            "reconciled": self.reconciled,
            "reconcile_message": self.reconcile_message,
            "aborted": self.aborted,
            "abort_reason": self.abort_reason,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
            "results": [r.model_dump(mode="json") for r in self.results],
        }
