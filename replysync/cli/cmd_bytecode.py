"""Preview command — show the replies a /bytecode message would get."""

import click
from rich.panel import Panel
from rich.text import Text

from . import cli
from .shared import console


@cli.command()
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option("--max-size", type=int, default=None, help="Maximum characters per message (default: from settings)")
def bytecode(source, max_size):
    """Disassemble a Python file (or - for stdin) and print the replies."""
    from replysync.config import load_settings
    from replysync.engine import render_result
    from replysync.processor import BytecodeProcessor, FatalError

    settings = load_settings() if max_size is None else load_settings(unit_max_size=max_size)
    result = BytecodeProcessor(filename=source.name).process(source.read())
    pieces = render_result(result, settings.unit_max_size)

    style = "red" if isinstance(result, FatalError) else "blue"
    for i, piece in enumerate(pieces, 1):
        console.print(Panel(
            Text(piece),
            title=f"Message {i}/{len(pieces)}",
            subtitle=f"{len(piece)} chars",
            border_style=style,
        ))
