"""
Status use case — read-only probe of every catalog step.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from catana.core.errors import ProbeError
from catana.core.use_cases.run import Session

Presence = Literal["present", "missing", "unknown", "no-check"]


@dataclass
class StepStatus:
    step_id: str
    description: str
    presence: Presence
    key: str | None = None
    detail: str = ""


@dataclass
class StatusResult:
    """Presence of every step in catalog order."""

    steps: list[StepStatus] = field(default_factory=list)
    adapters: dict[str, dict] = field(default_factory=dict)

    def count(self, presence: Presence) -> int:
        return sum(1 for s in self.steps if s.presence == presence)

    def to_dict(self) -> dict:
        return {
            "steps": [
                {
                    "id": s.step_id,
                    "key": s.key,
                    "description": s.description,
                    "presence": s.presence,
                    "detail": s.detail,
                }
                for s in self.steps
            ],
            "present": self.count("present"),
            "missing": self.count("missing"),
            "unknown": self.count("unknown"),
            "adapters": self.adapters,
        }


def get_status(session: Session) -> StatusResult:
    """Evaluate each step's precondition without running anything."""
    result = StatusResult(adapters=session.registry.adapter_status())
    for step in session.catalog.all():
        if step.precondition is None:
            result.steps.append(StepStatus(step.id, step.description, "no-check", step.key))
            continue
        try:
            present = session.checker.check(step.precondition)
        except ProbeError as e:
            result.steps.append(
                StepStatus(step.id, step.description, "unknown", step.key, detail=str(e))
            )
            continue
        result.steps.append(
            StepStatus(
                step.id,
                step.description,
                "present" if present else "missing",
                step.key,
                detail=step.precondition.describe(),
            )
        )
    return result
