"""
Run use case — provision a selection of steps on this machine.

This is the top-level orchestrator: it loads config and the catalog,
wires adapters, runner, reconciler and privilege guard, executes the
batch, and records it in the audit ledger. The full vertical slice from
operator choice to audited provisioning.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from catana.adapters.base import CommandInvoker
from catana.adapters.registry import AdapterRegistry, build_default_registry
from catana.core.config.catalog_loader import load_catalog
from catana.core.config.loader import ProvisionConfig, find_config_file, load_config
from catana.core.engine.catalog import StepCatalog
from catana.core.engine.executor import BatchExecutor
from catana.core.engine.presence import PresenceChecker
from catana.core.engine.runner import StepRunner
from catana.core.errors import FatalEnvironmentError
from catana.core.models.result import BatchReport
from catana.core.persistence.audit import AuditEntry, AuditWriter
from catana.core.services.privilege import PrivilegeGuard
from catana.core.services.restarts import NeedrestartReconciler, Reconciler

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Everything a batch needs, loaded once per CLI invocation."""

    config: ProvisionConfig
    catalog: StepCatalog
    invoker: CommandInvoker
    registry: AdapterRegistry
    checker: PresenceChecker = field(default_factory=PresenceChecker)
    config_path: Path | None = None

    @property
    def mock_mode(self) -> bool:
        return self.registry.mock_mode


def open_session(
    config_path: Path | None = None,
    catalog_path: Path | None = None,
    mock_mode: bool = False,
    invoker: CommandInvoker | None = None,
) -> Session:
    """Load configuration and catalog and wire the adapters.

    In mock mode no command reaches the system: actions are answered by
    the registry and the invoker only records.

    Raises:
        ConfigError: If the config file is missing or invalid.
        CatalogError: If the catalog file is missing or invalid.
    """
    config_path = find_config_file(config_path)
    config = load_config(config_path)
    catalog = load_catalog(catalog_path, config)

    if invoker is None:
        if mock_mode:
            from catana.adapters.mock import RecordingInvoker

            invoker = RecordingInvoker()
        else:
            from catana.adapters.shell.command import SubprocessInvoker

            invoker = SubprocessInvoker(default_timeout=config.command_timeout)

    registry = build_default_registry(invoker=invoker, mock_mode=mock_mode)
    return Session(
        config=config,
        catalog=catalog,
        invoker=invoker,
        registry=registry,
        config_path=config_path,
    )


@dataclass
class RunResult:
    """Result of provisioning a batch."""

    report: BatchReport | None = None
    step_ids: list[str] = field(default_factory=list)
    error: str | None = None
    fatal: bool = False

    @property
    def exit_code(self) -> int:
        if self.fatal or self.report is None:
            return 2
        return self.report.exit_code

    def to_dict(self) -> dict:
        result: dict = {"step_ids": list(self.step_ids), "exit_code": self.exit_code}
        if self.error:
            result["error"] = self.error
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def run_steps(
    session: Session,
    ids: Sequence[str],
    reconciler: Reconciler | None = None,
    guard: PrivilegeGuard | None = None,
    audit: bool = True,
) -> RunResult:
    """Provision the given step or bundle ids, in order.

    Args:
        session: Loaded configuration, catalog and adapters.
        ids: Step ids and/or bundle ids; bundles expand to their steps.
        reconciler: Restart reconciler. Defaults to needrestart, or a
            no-op mock in mock mode.
        guard: Privilege guard. Defaults to the configured requirement;
            mock mode never requires root.
        audit: Whether to append the batch to the audit ledger.

    Returns:
        RunResult with the batch report. A fatal abort sets ``fatal``
        and keeps the partial report when there is one.
    """
    step_ids = session.catalog.expand(ids)
    result = RunResult(step_ids=step_ids)

    if reconciler is None:
        if session.mock_mode:
            from catana.adapters.mock import MockReconciler

            reconciler = MockReconciler()
        else:
            reconciler = NeedrestartReconciler(
                session.invoker, conf_path=session.config.needrestart_conf
            )

    if guard is None:
        guard = PrivilegeGuard(require_root=session.config.require_root and not session.mock_mode)

    # ── Refuse to start without privileges ──────────────────────
    try:
        guard.check()
    except FatalEnvironmentError as e:
        result.error = str(e)
        result.fatal = True
        return result

    # ── Execute ──────────────────────────────────────────────────
    runner = StepRunner(session.registry, checker=session.checker, config=session.config)
    executor = BatchExecutor(session.catalog, runner, reconciler=reconciler, guard=guard)

    try:
        result.report = executor.execute(step_ids)
    except FatalEnvironmentError as e:
        result.error = str(e)
        result.fatal = True
        result.report = e.report

    # ── Write audit log ──────────────────────────────────────────
    if audit and result.report is not None and session.config.audit_file is not None:
        writer = AuditWriter(session.config.audit_file)
        writer.write(AuditEntry.from_report(result.report, mock=session.mock_mode))

    return result
