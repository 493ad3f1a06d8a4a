"""
Shared CLI helpers — session loading and batch rendering.

Used by both the one-shot ``run`` command and the interactive menu.
"""

from __future__ import annotations

import sys

import click

from catana.core.config.loader import ConfigError
from catana.core.engine.catalog import StepCatalog
from catana.core.errors import CatalogError
from catana.core.models.result import BatchReport
from catana.core.use_cases.run import RunResult, Session, open_session

_STATUS_COLORS = {"ok": "green", "partial": "yellow", "failed": "red", "aborted": "red"}


def open_cli_session(ctx: click.Context, mock: bool = False) -> Session:
    """Load config and catalog, or exit 2 with the error."""
    try:
        return open_session(
            config_path=ctx.obj.get("config_path"),
            catalog_path=ctx.obj.get("catalog_path"),
            mock_mode=mock,
        )
    except (ConfigError, CatalogError) as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(2)


def render_menu(catalog: StepCatalog) -> None:
    click.secho("\ncatana — provisioning menu", fg="cyan", bold=True)
    for entry in catalog.menu():
        click.echo(f"  {entry.key}) {entry.description}")
    click.echo("  Q) Quit")


def render_report(report: BatchReport, verbose: bool = False) -> None:
    """Per-step lines followed by the batch summary."""
    click.echo()
    for r in report.results:
        timing = f" ({r.duration_ms}ms)" if r.duration_ms else ""
        label = f"  {r.description}" if r.description else ""
        if r.outcome == "succeeded":
            click.secho(f"   ✓ {r.step_id}", fg="green", nl=False)
            click.echo(f"{label}{timing}")
            if r.verified is False:
                click.secho(f"     │ {r.message}", fg="yellow")
        elif r.outcome == "skipped":
            click.secho(f"   ⊘ {r.step_id}", fg="yellow", nl=False)
            click.echo(f"{label} ({r.message})")
        else:
            click.secho(f"   ✗ {r.step_id}", fg="red", nl=False)
            click.echo(f"{label}{timing}")
            lines = r.message.splitlines() or [""]
            for line in lines[: 10 if verbose else 3]:
                click.echo(f"     │ {line}")

    click.echo()
    click.secho(
        f"   {report.status.upper()}: {report.succeeded} succeeded, "
        f"{report.skipped} skipped, {report.failed} failed",
        fg=_STATUS_COLORS.get(report.status, "white"),
        bold=True,
    )
    if report.aborted:
        not_run = len(report.requested) - report.total
        click.secho(f"   Aborted: {report.abort_reason} ({not_run} step(s) not run)", fg="red")
    if report.reconcile_message:
        click.echo(f"   {report.reconcile_message}")
    if report.needs_restart:
        click.secho("   A restart is still pending.", fg="yellow")


def render_result(result: RunResult, verbose: bool = False) -> None:
    if result.report is not None:
        render_report(result.report, verbose=verbose)
    elif result.error:
        click.secho(f"❌ {result.error}", fg="red", err=True)


def offer_reboot(session: Session, result: RunResult) -> None:
    """Ask for a reboot when a restart is still pending on a terminal."""
    from catana.core.services.restarts import request_reboot

    # Only offered while needrestart still reports pending restarts,
    # not after every upgrade.
    if result.report is None or not result.report.needs_restart:
        return
    if session.mock_mode or not sys.stdin.isatty():
        return
    if click.confirm("Reboot now?", default=False):
        click.echo("Rebooting...")
        request_reboot(session.invoker)
