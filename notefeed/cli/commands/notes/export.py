"""Export command for the notes feed."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from notefeed.cli.utils.session import get_app
from notefeed.gateway import NotesError

console = Console()


def main(
    output: Path = typer.Argument(Path("notes.html"), help="Where to write the HTML page"),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Only notes containing this text"),
):
    """Write every note, grouped by day, to a standalone HTML page."""
    api = get_app()

    try:
        if search:
            api.search(search)
        else:
            api.load()
        api.load_all()
    except NotesError as e:
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        raise typer.Exit(1)

    output.write_text(api.render_html(), encoding="utf-8")
    console.print(f"Exported {len(api.view().items)} notes to [bold]{output}[/bold]")
