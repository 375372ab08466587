"""Notes feed commands for the notefeed CLI."""

import typer

from . import add, delete, edit, export, list_notes

app = typer.Typer(help="Notes feed commands")

# Leaf commands, so options may follow the positional arguments
app.command("list")(list_notes.main)
app.command("add")(add.main)
app.command("edit")(edit.main)
app.command("delete")(delete.main)
app.command("export")(export.main)
