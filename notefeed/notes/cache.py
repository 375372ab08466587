"""
Client-side cache for the paginated notes feed.

Holds the fetched pages exactly as the feed shows them, plus a generation
counter. Reads capture the generation when they start; `cancel()` bumps it,
so a read that resolves after an optimistic write is discarded instead of
overwriting that write.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .domain import FeedNote

LOGGER = logging.getLogger(__name__)

Pages = List[List[FeedNote]]


@dataclass(frozen=True)
class CacheSnapshot:
    pages: Tuple[Tuple[FeedNote, ...], ...]
    page_params: Tuple[int, ...]


def chunk(notes: List[FeedNote], page_size: int) -> Pages:
    """Split a flat list into pages; always returns at least one page."""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    pages = [notes[i : i + page_size] for i in range(0, len(notes), page_size)]
    return pages or [[]]


class InfiniteNotesCache:
    def __init__(self) -> None:
        self._pages: Pages = [[]]
        self._page_params: List[int] = [1]
        self._generation = 0

    # ----- Reads -----

    @property
    def pages(self) -> Pages:
        return [list(p) for p in self._pages]

    @property
    def page_params(self) -> List[int]:
        return list(self._page_params)

    @property
    def generation(self) -> int:
        return self._generation

    def flatten(self) -> List[FeedNote]:
        return [n for page in self._pages for n in page]

    def keys(self) -> List[str]:
        return [n.key for n in self.flatten()]

    def find(self, key: str) -> Optional[FeedNote]:
        for note in self.flatten():
            if note.key == key:
                return note
        return None

    # ----- Writes -----

    def cancel(self) -> int:
        """Invalidate in-flight reads; returns the new generation."""
        self._generation += 1
        LOGGER.debug("Cache reads cancelled; generation=%d", self._generation)
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def reset(self, first_page: Optional[List[FeedNote]] = None) -> None:
        self.cancel()
        self._pages = [list(first_page or [])]
        self._page_params = [1]

    def append_page(self, page_param: int, notes: List[FeedNote]) -> None:
        if page_param == 1:
            self._pages = [list(notes)]
            self._page_params = [1]
            return
        self._pages.append(list(notes))
        self._page_params.append(page_param)

    def set_pages(self, updater: Callable[[Pages], Pages]) -> None:
        """Apply ``updater`` to the current pages (never to a stale copy)."""
        updated = updater(self.pages)
        if not updated:
            updated = [[]]
        self._pages = [list(p) for p in updated]
        # page params track page count; extra pages from re-chunking get new numbers
        while len(self._page_params) < len(self._pages):
            self._page_params.append(self._page_params[-1] + 1)
        del self._page_params[len(self._pages):]

    def prepend(self, note: FeedNote) -> None:
        self.set_pages(lambda pages: [[note, *pages[0]], *pages[1:]])

    def replace_content(self, key: str, content: str, page_size: int) -> bool:
        """Swap the content of one row and re-chunk; the row keeps its ref."""
        found = False

        def _update(pages: Pages) -> Pages:
            nonlocal found
            flat = []
            for n in (n for page in pages for n in page):
                if n.key == key:
                    found = True
                    n = FeedNote(
                        ref=n.ref,
                        content=content,
                        created_at=n.created_at,
                        created_by=n.created_by,
                    )
                flat.append(n)
            return chunk(flat, page_size)

        self.set_pages(_update)
        return found

    def remove(self, key: str, page_size: int) -> None:
        self.set_pages(
            lambda pages: chunk(
                [n for page in pages for n in page if n.key != key], page_size
            )
        )

    # ----- Snapshots -----

    def snapshot(self) -> CacheSnapshot:
        return CacheSnapshot(
            pages=tuple(tuple(p) for p in self._pages),
            page_params=tuple(self._page_params),
        )

    def restore(self, snap: CacheSnapshot) -> None:
        self._pages = [list(p) for p in snap.pages]
        self._page_params = list(snap.page_params)
        LOGGER.debug("Cache restored to snapshot with %d pages", len(self._pages))
