# notefeed/notes/domain.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from ..gateway.models import NoteRow


@dataclass(frozen=True)
class Persisted:
    """A note the server has acknowledged."""

    id: str

    @property
    def key(self) -> str:
        return self.id


@dataclass(frozen=True)
class Pending:
    """A note shown before the server has assigned its id."""

    temp_id: str

    @property
    def key(self) -> str:
        return self.temp_id


NoteRef = Union[Persisted, Pending]


@dataclass(frozen=True)
class FeedNote:
    """One cached row of the feed, persisted or optimistic."""

    ref: NoteRef
    content: str
    created_at: datetime
    created_by: Optional[str] = None

    @property
    def key(self) -> str:
        """Render key; stable for the lifetime of the row."""
        return self.ref.key

    @property
    def is_optimistic(self) -> bool:
        return isinstance(self.ref, Pending)

    @classmethod
    def from_row(cls, row: NoteRow) -> "FeedNote":
        return cls(
            ref=Persisted(row.id),
            content=row.content,
            created_at=row.created_at,
            created_by=row.created_by,
        )
