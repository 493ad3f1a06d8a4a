"""
Interactive text menu — pick an entry by key, run it, repeat.

Usage::

    sudo catana menu
"""

from __future__ import annotations

import sys

import click

from catana.ui.cli.render import offer_reboot, open_cli_session, render_menu, render_result

QUIT_KEY = "q"


@click.command()
@click.option("--mock", is_flag=True, help="Answer every action with a mock success.")
@click.option("--no-reboot-prompt", is_flag=True, help="Never offer to reboot.")
@click.pass_context
def menu(ctx: click.Context, mock: bool, no_reboot_prompt: bool) -> None:
    """Interactive provisioning menu (Q to quit)."""
    from catana.core.use_cases.run import run_steps

    session = open_cli_session(ctx, mock=mock)
    verbose = ctx.obj.get("verbose", False)

    while True:
        render_menu(session.catalog)
        choice = click.prompt("Enter your choice", default="", show_default=False).strip()
        if not choice:
            continue
        if choice.lower() == QUIT_KEY:
            click.echo("Exiting...")
            return

        entry_id = session.catalog.resolve_key(choice)
        if entry_id is None:
            click.secho("Invalid option. Please try again.", fg="red")
            continue

        result = run_steps(session, [entry_id])
        render_result(result, verbose=verbose)
        if result.fatal:
            sys.exit(2)
        if not no_reboot_prompt:
            offer_reboot(session, result)
