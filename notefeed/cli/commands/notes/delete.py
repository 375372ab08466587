"""Delete command for the notes feed."""

import time
from typing import Optional

import typer
from rich.console import Console

from notefeed.cli.utils.session import get_app
from notefeed.gateway import NotesError
from notefeed.notes import Persisted

console = Console()


def main(
    note_id: str = typer.Argument(..., help="ID of the note to delete"),
    undo_window: Optional[float] = typer.Option(
        None, "--undo-window", "-w", min=0, help="Seconds to wait for Ctrl+C before deleting"
    ),
    force: bool = typer.Option(False, "--force", help="Delete without an undo window"),
):
    """Delete a note and its images; Ctrl+C during the undo window keeps it."""
    api = get_app()

    try:
        row = api.gateway.get(note_id)
    except NotesError as e:
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        raise typer.Exit(1)

    entry = api.mutations.schedule_delete(Persisted(row.id), row.content)
    if force:
        ok = api.dismiss_delete(entry.key)
    else:
        window = api.settings.undo_seconds if undo_window is None else undo_window
        try:
            with console.status(f"Deleting in {window:g}s, press Ctrl+C to undo"):
                time.sleep(window)
        except KeyboardInterrupt:
            api.undo_delete(entry.key)
            console.print("Delete undone")
            return
        ok = api.dismiss_delete(entry.key)

    if not ok:
        raise typer.Exit(1)
    console.print(f"Deleted note [bold]{note_id}[/bold]")
