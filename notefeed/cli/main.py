#!/usr/bin/env python
"""Command line interface for notefeed."""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from notefeed.cli.commands import config, notes

app = typer.Typer(help="Browse and write notes in your notefeed")
console = Console()

# Add command groups
app.add_typer(config.app, name="config")
app.add_typer(notes.app, name="notes")


@app.callback()
def callback(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logs"
    ),
):
    """Personal note feed with optimistic updates."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
