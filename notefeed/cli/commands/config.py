"""Configuration commands for the notefeed CLI."""

import typer
from rich.console import Console
from rich.table import Table

from notefeed.config import CONFIG_PATH, Settings, load_config, save_config
from notefeed.cli.utils.session import load_settings

app = typer.Typer(help="Show or change configuration")
console = Console()

_SECRET_KEYS = {"anon_key", "access_token"}


def _mask(key: str, value) -> str:
    if value in (None, ""):
        return "[dim]-[/dim]"
    if key in _SECRET_KEYS:
        text = str(value)
        return f"{text[:4]}…" if len(text) > 4 else "●●●●"
    return str(value)


@app.command("show")
def show():
    """Show the effective configuration (file + environment)."""
    settings = load_settings()
    table = Table("Key", "Value")
    for key, value in settings.to_dict().items():
        table.add_row(key, _mask(key, value))
    console.print(table)
    console.print(f"[dim]Config file: {CONFIG_PATH}[/dim]")


@app.command("set")
def set_value(
    key: str = typer.Argument(..., help="Setting name, e.g. url or page_size"),
    value: str = typer.Argument(..., help="New value"),
):
    """Store a setting in the config file."""
    if key not in Settings.__dataclass_fields__:
        console.print(f"[bold red]Error:[/bold red] Unknown setting: {key}")
        raise typer.Exit(1)
    config = load_config()
    config[key] = value
    try:
        Settings.from_dict(config)
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(1) from exc
    try:
        save_config(config)
    except OSError as exc:
        console.print(f"[bold red]Error:[/bold red] Could not save config file: {exc}")
        raise typer.Exit(1) from exc
    console.print(f"Saved [bold]{key}[/bold]")
