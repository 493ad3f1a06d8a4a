"""
catana — CLI entrypoint.

Usage:
    catana --help
    catana list
    sudo catana run base-tools
    sudo catana menu
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from catana import __version__
from catana.core.observability.logging_config import resolve_level, setup_from_environment
from catana.ui.cli.menu import menu
from catana.ui.cli.render import offer_reboot, open_cli_session, render_result


@click.group()
@click.version_option(version=__version__, prog_name="catana")
@click.option("--verbose", "-v", is_flag=True, help="Log every probe and action.")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to config.yml (default: $CATANA_CONFIG or ~/.config/catana/config.yml).",
)
@click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(exists=False),
    default=None,
    help="Catalog file to use instead of the configured or built-in one.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    catalog_path: str | None,
) -> None:
    """catana — idempotent provisioning for security-testing machines."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["catalog_path"] = Path(catalog_path) if catalog_path else None

    setup_from_environment(resolve_level(verbose=verbose, quiet=quiet, debug=debug))


@cli.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_steps(ctx: click.Context, as_json: bool) -> None:
    """List catalog entries with their menu keys."""
    session = open_cli_session(ctx)
    catalog = session.catalog

    if as_json:
        data = {
            "menu": [
                {"key": e.key, "id": e.id, "description": e.description, "bundle": e.is_bundle}
                for e in catalog.menu()
            ],
            "bundles": {b.id: list(b.steps) for b in catalog.bundles()},
            "steps": [
                {
                    "id": s.id,
                    "description": s.description,
                    "action": s.action.kind,
                    "restart_sensitive": s.restart_sensitive,
                }
                for s in catalog.all()
            ],
        }
        click.echo(json.dumps(data, indent=2))
        return

    for entry in catalog.menu():
        click.secho(f"  [{entry.key}] ", fg="cyan", nl=False)
        click.echo(f"{entry.description} ({entry.id})")
        if entry.is_bundle:
            bundle = catalog.get_bundle(entry.id)
            assert bundle is not None
            for step_id in bundle.steps:
                click.echo(f"        • {step_id}")

    click.echo()
    click.secho(f"   Steps: {len(catalog)}", bold=True)
    for step in catalog.all():
        marker = " ↻" if step.restart_sensitive else ""
        click.echo(f"     {step.id:<18} {step.action.summary()}{marker}")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Probe every step without changing anything."""
    from catana.core.use_cases.status import get_status

    session = open_cli_session(ctx)
    result = get_status(session)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    markers = {
        "present": ("✓", "green"),
        "missing": ("✗", "red"),
        "unknown": ("?", "yellow"),
        "no-check": ("·", "white"),
    }
    for s in result.steps:
        symbol, color = markers[s.presence]
        click.secho(f"   {symbol} {s.step_id:<18}", fg=color, nl=False)
        click.echo(f" {s.presence}" + (f"  ({s.detail})" if s.detail else ""))

    click.echo()
    click.echo(
        f"   {result.count('present')} present, {result.count('missing')} missing, "
        f"{result.count('unknown')} unknown"
    )
    unavailable = [kind for kind, info in result.adapters.items() if not info["available"]]
    if unavailable:
        click.secho(f"   No tool available for: {', '.join(unavailable)}", fg="yellow")


@cli.command()
@click.argument("ids", nargs=-1)
@click.option("--all", "run_all", is_flag=True, help="Run every step in catalog order.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--mock", is_flag=True, help="Answer every action with a mock success.")
@click.option("--no-reboot-prompt", is_flag=True, help="Never offer to reboot.")
@click.pass_context
def run(
    ctx: click.Context,
    ids: tuple[str, ...],
    run_all: bool,
    as_json: bool,
    mock: bool,
    no_reboot_prompt: bool,
) -> None:
    """Provision steps or bundles by id, in the order given.

    Examples:

        sudo catana run nmap rlwrap

        sudo catana run base-tools

        catana run --all --mock
    """
    from catana.core.use_cases.run import run_steps

    if not ids and not run_all:
        raise click.UsageError("Give at least one step id, or --all.")

    session = open_cli_session(ctx, mock=mock)
    selection = [s.id for s in session.catalog.all()] if run_all else list(ids)
    result = run_steps(session, selection)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if mock:
        click.secho("[mock] no command was run", fg="cyan")
    render_result(result, verbose=ctx.obj.get("verbose", False))

    if not result.fatal and not no_reboot_prompt:
        offer_reboot(session, result)
    sys.exit(result.exit_code)


@cli.command()
@click.option("-n", "limit", default=10, show_default=True, help="Number of batches to show.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def history(ctx: click.Context, limit: int, as_json: bool) -> None:
    """Show recent batches from the audit ledger."""
    from catana.core.persistence.audit import AuditWriter

    session = open_cli_session(ctx)
    audit_file = session.config.audit_file
    assert audit_file is not None
    entries = AuditWriter(audit_file).read_recent(limit)

    if as_json:
        click.echo(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
        return

    if not entries:
        click.echo(f"No batches recorded in {audit_file}")
        return

    colors = {"ok": "green", "partial": "yellow", "failed": "red", "aborted": "red"}
    for e in entries:
        mock_label = " [mock]" if e.mock else ""
        click.echo(f"   {e.timestamp}  {e.batch_id}{mock_label}  ", nl=False)
        click.secho(e.status, fg=colors.get(e.status, "white"), nl=False)
        click.echo(
            f"  {e.steps_succeeded}✓ {e.steps_skipped}⊘ {e.steps_failed}✗"
            + (f"  failed: {', '.join(e.failed_steps)}" if e.failed_steps else "")
        )


cli.add_command(menu)


if __name__ == "__main__":
    cli()
