"""Shared helpers for CLI commands: settings, notifier, app construction."""

from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from notefeed.config import CONFIG_PATH, Settings
from notefeed.notes import NotesApp

console = Console()


class ConsoleNotifier:
    """Prints notifications the way the web UI shows its toasts."""

    def __init__(self, out: Optional[Console] = None):
        self._console = out or console

    def success(self, message: str) -> None:
        self._console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self._console.print(f"[bold red]Error:[/bold red] {message}")

    def info(self, message: str, *, action: Optional[str] = None) -> None:
        if action:
            self._console.print(f"{message} [dim]({action})[/dim]")
        else:
            self._console.print(message)


def load_settings() -> Settings:
    try:
        return Settings.load()
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] Invalid configuration: {exc}")
        raise typer.Exit(1) from exc


def get_app(settings: Optional[Settings] = None) -> NotesApp:
    """Build a NotesApp from configuration or exit with setup help."""
    settings = settings or load_settings()
    if not settings.is_configured:
        console.print("[bold red]Error:[/bold red] notefeed is not configured")
        console.print(
            Panel(
                "Set the project URL and anon key, either in the environment:\n"
                "  export NOTEFEED_URL=https://<project>.supabase.co\n"
                "  export NOTEFEED_ANON_KEY=<anon key>\n"
                "or in the config file:\n"
                "  notefeed config set url https://<project>.supabase.co\n"
                "  notefeed config set anon_key <anon key>\n\n"
                f"Config file: {CONFIG_PATH}",
                title="Configuration Required",
                border_style="red",
            )
        )
        raise typer.Exit(1)
    return NotesApp.from_settings(settings, notifier=ConsoleNotifier())
