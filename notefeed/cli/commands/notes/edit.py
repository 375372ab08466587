"""Edit command for the notes feed."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from notefeed.cli.utils.content import read_content
from notefeed.cli.utils.session import get_app
from notefeed.notes import Persisted

console = Console()


def main(
    note_id: str = typer.Argument(..., help="ID of the note"),
    content: Optional[str] = typer.Argument(None, help="New text or HTML"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", exists=True, dir_okay=False, help="Read the new content from a file"),
):
    """Replace a note's content."""
    body = read_content(content, file)
    if not body or body == "<p></p>":
        console.print("[yellow]Warning:[/yellow] No content specified")
        return

    api = get_app()
    if not api.update_note(Persisted(note_id), body):
        raise typer.Exit(1)
    console.print(f"Updated note [bold]{note_id}[/bold]")
