"""
Audit ledger — what was provisioned on this machine, and when.

One NDJSON line per batch, appended after the batch finishes (or
aborts). Lines are never rewritten; ``catana history`` reads them back.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from catana.core.models.result import BatchReport

logger = logging.getLogger(__name__)


class AuditEntry(BaseModel):
    """Summary of one batch."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    batch_id: str = ""
    requested: list[str] = Field(default_factory=list)

    status: str = ""               # ok, partial, failed, aborted
    steps_total: int = 0
    steps_succeeded: int = 0
    steps_skipped: int = 0
    steps_failed: int = 0
    failed_steps: list[str] = Field(default_factory=list)

    needs_restart: bool = False
    abort_reason: str = ""
    mock: bool = False

    @classmethod
    def from_report(cls, report: BatchReport, mock: bool = False) -> AuditEntry:
        return cls(
            batch_id=report.batch_id,
            requested=list(report.requested),
            status=report.status,
            steps_total=report.total,
            steps_succeeded=report.succeeded,
            steps_skipped=report.skipped,
            steps_failed=report.failed,
            failed_steps=[r.step_id for r in report.results if r.failed],
            needs_restart=report.needs_restart,
            abort_reason=report.abort_reason,
            mock=mock,
        )


class AuditWriter:
    """Appends entries to, and reads them back from, one ledger file."""

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: AuditEntry) -> None:
        """Append ``entry`` as a single JSON line.

        An unwritable ledger is logged and otherwise ignored; the batch
        it describes has already happened.
        """
        record = json.dumps(entry.model_dump(mode="json"), ensure_ascii=False)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as ledger:
                ledger.write(record + "\n")
        except OSError as e:
            logger.error("Cannot append to audit ledger %s: %s", self._path, e)
            return
        logger.debug("Audit entry written for %s", entry.batch_id)

    def read_all(self) -> list[AuditEntry]:
        """Every readable entry, oldest first."""
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.error("Cannot read audit ledger %s: %s", self._path, e)
            return []

        entries: list[AuditEntry] = []
        for number, raw in enumerate(text.splitlines(), start=1):
            if not raw.strip():
                continue
            try:
                entries.append(AuditEntry.model_validate_json(raw))
            except ValidationError as e:
                logger.warning("Ignoring unreadable ledger line %d: %s", number, e)
        return entries

    def read_recent(self, n: int = 20) -> list[AuditEntry]:
        """The last ``n`` entries, oldest first."""
        if n <= 0:
            return []
        return self.read_all()[-n:]
