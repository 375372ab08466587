"""Deadline queue for delete-with-undo."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .domain import NoteRef

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduledDelete:
    ref: NoteRef
    content: str
    deadline: float

    @property
    def key(self) -> str:
        return self.ref.key


class UndoQueue:
    """
    Deletions waiting out their undo window.

    Nothing runs in the background: the owner calls `due()` (or `pop()` for a
    dismissed notification) and commits what comes back.
    """

    def __init__(self, *, delay: float = 4.0, clock: Callable[[], float] = time.monotonic):
        self.delay = delay
        self._clock = clock
        self._entries: Dict[str, ScheduledDelete] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> List[str]:
        return list(self._entries)

    def schedule(self, ref: NoteRef, content: str) -> ScheduledDelete:
        entry = ScheduledDelete(ref=ref, content=content, deadline=self._clock() + self.delay)
        self._entries[entry.key] = entry
        LOGGER.debug("Delete of %s scheduled; undo until %.3f", entry.key, entry.deadline)
        return entry

    def cancel(self, key: str) -> Optional[ScheduledDelete]:
        """Undo: forget the entry if its window is still open."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.deadline:
            LOGGER.debug("Undo for %s arrived after the deadline", key)
            return None
        return self._entries.pop(key)

    def pop(self, key: str) -> Optional[ScheduledDelete]:
        return self._entries.pop(key, None)

    def due(self, now: Optional[float] = None) -> List[ScheduledDelete]:
        now = self._clock() if now is None else now
        ready = [e for e in self._entries.values() if now >= e.deadline]
        for entry in ready:
            del self._entries[entry.key]
        return ready
