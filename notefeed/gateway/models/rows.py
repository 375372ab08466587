"""
Pydantic models for the notes collection and the storage endpoints.

Operations:
    - GET    /rest/v1/notes
    - POST   /rest/v1/notes
    - PATCH  /rest/v1/notes?id=eq.<id>
    - DELETE /rest/v1/notes?id=eq.<id>
    - POST   /storage/v1/object/<bucket>/<path>
    - DELETE /storage/v1/object/<bucket>
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from dateutil.parser import isoparse
from pydantic import Field, field_validator

from ._base import RowModel


class NoteRow(RowModel):
    """A persisted note as stored by the gateway."""

    id: str
    """Server-assigned identifier"""
    content: str = ""
    """Rich text HTML"""
    created_at: datetime
    """Insert timestamp; drives ordering and day grouping"""
    created_by: Optional[str] = None
    """Owner reference"""

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, v):
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created_at(cls, v):
        """Parse ISO 8601 timestamps (Postgres emits "+00:00" offsets)."""
        if isinstance(v, str):
            return isoparse(v)
        return v

    @field_validator("content", mode="before")
    @classmethod
    def _null_content(cls, v):
        return "" if v is None else v


class NoteInsert(RowModel):
    content: str


class NoteUpdate(RowModel):
    content: str


class StorageUploadResponse(RowModel):
    key: str = Field(alias="Key")
    """Bucket-qualified key, e.g. "files/abc-photo.png" """


class StorageRemoveRequest(RowModel):
    prefixes: List[str]

