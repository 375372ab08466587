"""Personal note feed client with optimistic updates."""

from notefeed.config import Settings
from notefeed.gateway import NotesGatewayClient
from notefeed.notes import NotesApp

__version__ = "0.1.0"

__all__ = ["NotesApp", "NotesGatewayClient", "Settings"]
