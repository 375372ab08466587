"""List command for the notes feed."""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from notefeed.cli.utils.session import get_app
from notefeed.gateway import NotesError
from notefeed.notes.rendering import PLACEHOLDER_TEXT
from notefeed.notes.text import note_preview

console = Console()


def main(
    pages: int = typer.Option(1, "--pages", "-p", min=1, help="How many pages to load"),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Only notes containing this text"),
    all_pages: bool = typer.Option(False, "--all", help="Load every page"),
    width: int = typer.Option(80, help="Preview width in characters"),
):
    """List notes grouped by day."""
    api = get_app()

    try:
        if search:
            api.search(search)
        else:
            api.load()
        if all_pages:
            api.load_all()
        else:
            for _ in range(pages - 1):
                if not api.load_more():
                    break
        view = api.view()
    except NotesError as e:
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        raise typer.Exit(1)

    if view.show_placeholder:
        console.print(PLACEHOLDER_TEXT)
        return

    for group in view.groups:
        table = Table("ID", "Time", "Note", title=f"{group.label} ({group.badge})", title_justify="left")
        for item in group.items:
            table.add_row(
                api.resolve(item.note.ref),
                item.note.created_at.astimezone().strftime("%H:%M"),
                note_preview(item.note.content, width),
            )
        console.print(table)

    if view.has_next_page and not all_pages:
        console.print("[dim]More notes available: use --pages or --all[/dim]")
