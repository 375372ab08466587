"""Add command for the notes feed."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from notefeed.cli.utils.content import content_type_for, read_content
from notefeed.cli.utils.session import get_app
from notefeed.gateway import NotesError

console = Console()


def main(
    content: Optional[str] = typer.Argument(None, help="Note text or HTML"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", exists=True, dir_okay=False, help="Read the note from a file"),
    image: List[Path] = typer.Option([], "--image", "-i", exists=True, dir_okay=False, help="Attach an image (repeatable)"),
):
    """Create a note, uploading any attached images first."""
    api = get_app()
    editor = api.new_editor()

    body = read_content(content, file)
    editor.surface.type(body)
    for path in image:
        if editor.upload_image(path.name, path.read_bytes(), content_type=content_type_for(path)) is None:
            # drop whatever was already uploaded for this draft
            editor.surface.type("")
            editor.reset()
            raise typer.Exit(1)

    if not editor.can_submit():
        console.print("[bold red]Error:[/bold red] Nothing to save: the note is empty")
        raise typer.Exit(1)

    try:
        note = api.create_note(editor.value, editor)
    except NotesError as e:
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        raise typer.Exit(1)

    if note is None:
        raise typer.Exit(1)
    console.print(f"Created note [bold]{api.resolve(note.ref)}[/bold]")
