"""Public exports for gateway data models."""

from __future__ import annotations

from .rows import (
    NoteInsert,
    NoteRow,
    NoteUpdate,
    StorageRemoveRequest,
    StorageUploadResponse,
)

__all__ = [
    "NoteRow",
    "NoteInsert",
    "NoteUpdate",
    "StorageRemoveRequest",
    "StorageUploadResponse",
]
