"""Command modules for the notefeed CLI."""

# Import all command modules here for easy access
from notefeed.cli.commands import config, notes

__all__ = ["config", "notes"]
