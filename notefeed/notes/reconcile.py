"""Map temporary note ids to the ids the server assigned them."""

from __future__ import annotations

from typing import Dict, Iterator, Mapping

from .domain import NoteRef, Pending, Persisted
from .tracker import MutationTracker


class NoteNotSynced(LookupError):
    """A pending note has no server id yet, so it cannot be targeted remotely."""

    def __init__(self, temp_id: str):
        super().__init__(f"Note {temp_id} has not been saved yet")
        self.temp_id = temp_id


class ReconciliationMap(Mapping[str, str]):
    """
    Read-only ``temp_id -> real id`` view built from successful creates.

    Rows in the cache keep their temporary id as render key; only calls that
    go to the server are routed through this map.
    """

    def __init__(self, entries: Mapping[str, str]):
        self._entries: Dict[str, str] = dict(entries)

    @classmethod
    def from_mutations(cls, tracker: MutationTracker) -> "ReconciliationMap":
        entries: Dict[str, str] = {}
        for m in tracker.successful_creates():
            if m.result is not None:
                entries[m.key] = m.result.id
        return cls(entries)

    def __getitem__(self, temp_id: str) -> str:
        return self._entries[temp_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, key: str) -> str:
        """Mapped id for ``key``, or ``key`` itself when it is already real."""
        return self._entries.get(key, key)

    def resolve(self, ref: NoteRef) -> str:
        if isinstance(ref, Persisted):
            return ref.id
        if isinstance(ref, Pending):
            try:
                return self._entries[ref.temp_id]
            except KeyError:
                raise NoteNotSynced(ref.temp_id) from None
        raise TypeError(f"Unsupported note reference: {ref!r}")
