"""Start command."""

import asyncio
import click

from . import cli
from .shared import console


@cli.command()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def start(debug):
    """Start the Telegram bot."""
    from replysync.main import run
    console.print("[bold blue]Starting replysync...[/bold blue]")
    asyncio.run(run(debug=debug))
