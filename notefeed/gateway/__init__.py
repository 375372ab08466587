"""Typed access to the hosted notes backend."""

from .client import (
    NoteNotFound,
    NotesApiError,
    NotesAuthError,
    NotesError,
    NotesGatewayClient,
    NotesRateLimited,
)
from .models import NoteRow

__all__ = [
    "NotesGatewayClient",
    "NoteRow",
    "NotesError",
    "NotesAuthError",
    "NotesRateLimited",
    "NotesApiError",
    "NoteNotFound",
]
