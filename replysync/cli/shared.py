"""Shared utilities for replysync CLI commands."""

from rich.console import Console

console = Console()
