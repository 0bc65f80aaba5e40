"""replysync CLI — command line interface."""

import click
from replysync import __version__
from .shared import console


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="replysync")
@click.pass_context
def cli(ctx):
    """replysync — Telegram replies that follow their command message"""
    if ctx.invoked_subcommand is None:
        _show_help()


def _show_help():
    """Show all available commands."""
    console.print(f"[bold]replysync v{__version__}[/bold] — Telegram replies that follow their command message\n")

    commands = [
        ("start", "Start the Telegram bot"),
        ("bytecode", "Preview the replies for a Python file (no bot needed)"),
    ]
    for name, desc in commands:
        console.print(f"    [bold]replysync {name:10s}[/bold] {desc}")
    console.print()

    console.print("[dim]Run 'replysync <command> --help' for details on a specific command.[/dim]")


# Import all command modules (registers commands onto cli group)
from . import cmd_start  # noqa: E402, F401
from . import cmd_bytecode  # noqa: E402, F401
