"""
Read path of the notes feed.

Public API:
  - NotesFeed.fetch_page(page, search=None) -> List[NoteRow]
  - NotesFeed.load_initial(rows)
  - NotesFeed.fetch_next_page() / begin_next_page() + complete()/fail()
  - NotesFeed.on_sentinel_visible()
  - NotesFeed.set_search(query)
  - NotesFeed.view(now=None) -> FeedView

Pages are 1-based. Page ``n`` covers rows ``[(n-1)*P, n*P - 1]`` of the
newest-first ordering. There is a next page as long as the last fetched
page was non-empty.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from ..gateway.models import NoteRow
from .cache import InfiniteNotesCache
from .dates import count_badge, day_label
from .domain import FeedNote
from .state import DeletedIds
from .text import matches_query

if TYPE_CHECKING:  # pragma: no cover - import for type checking only
    from ..gateway.client import NotesGatewayClient

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedItem:
    note: FeedNote
    is_exiting: bool = False

    @property
    def key(self) -> str:
        return self.note.key


@dataclass(frozen=True)
class DayGroup:
    label: str
    items: List[FeedItem]
    badge: str


@dataclass(frozen=True)
class FeedView:
    groups: List[DayGroup]
    has_next_page: bool
    is_fetching_next_page: bool
    show_placeholder: bool

    @property
    def items(self) -> List[FeedItem]:
        return [item for g in self.groups for item in g.items]

    @property
    def show_skeletons(self) -> bool:
        return self.is_fetching_next_page and len(self.items) > 1


@dataclass(frozen=True)
class PageTicket:
    """An in-flight page read, valid only for the generation it started in."""

    page: int
    search: Optional[str]
    generation: int


@dataclass
class _FetchState:
    in_flight: Optional[PageTicket] = None
    last_page_size: Optional[int] = None
    pages_fetched: int = 0
    last_error: Optional[BaseException] = None


class NotesFeed:
    def __init__(
        self,
        gateway: "NotesGatewayClient",
        *,
        cache: Optional[InfiniteNotesCache] = None,
        deleted: Optional[DeletedIds] = None,
        page_size: int = 16,
        tz: Optional[tzinfo] = None,
        has_pending_create: Callable[[], bool] = lambda: False,
    ):
        self._gateway = gateway
        self.cache = cache if cache is not None else InfiniteNotesCache()
        self.deleted = deleted if deleted is not None else DeletedIds()
        self.page_size = page_size
        self.tz = tz
        self.search: Optional[str] = None
        self._has_pending_create = has_pending_create
        self._fetch = _FetchState()

    # ----- Fetching -----

    def fetch_page(self, page: int, search: Optional[str] = None) -> List[NoteRow]:
        """One page of rows, newest first; errors from the gateway propagate."""
        if page < 1:
            raise ValueError("page numbers start at 1")
        offset = (page - 1) * self.page_size
        query = search.strip() if search and search.strip() else None
        rows = self._gateway.select_range(offset, self.page_size, search=query)
        if query:
            rows = [r for r in rows if matches_query(r.content, query)]
        LOGGER.debug("Fetched page %d (%d rows)", page, len(rows))
        return rows

    def load_initial(self, rows: List[NoteRow]) -> None:
        """Seed the first page, e.g. with rows fetched before the feed was built."""
        self.cache.reset([FeedNote.from_row(r) for r in rows])
        self._fetch = _FetchState(last_page_size=len(rows), pages_fetched=1)

    def refresh(self) -> None:
        """Drop every cached page and fetch page 1 again."""
        self.cache.reset()
        self._fetch = _FetchState()
        ticket = self._begin(1)
        try:
            rows = self.fetch_page(1, self.search)
        except Exception as exc:
            self.fail(ticket, exc)
            raise
        self.complete(ticket, rows)

    @property
    def has_next_page(self) -> bool:
        return self._fetch.last_page_size is None or self._fetch.last_page_size > 0

    @property
    def is_fetching_next_page(self) -> bool:
        return self._fetch.in_flight is not None

    @property
    def next_page_number(self) -> int:
        return self._fetch.pages_fetched + 1

    def begin_next_page(self) -> Optional[PageTicket]:
        """Start reading the next page; None when exhausted or already reading."""
        if self.is_fetching_next_page or not self.has_next_page:
            return None
        return self._begin(self.next_page_number)

    def _begin(self, page: int) -> PageTicket:
        ticket = PageTicket(page=page, search=self.search, generation=self.cache.generation)
        self._fetch.in_flight = ticket
        return ticket

    def complete(self, ticket: PageTicket, rows: List[NoteRow]) -> bool:
        """Store a finished read; returns False when the read went stale."""
        if self._fetch.in_flight == ticket:
            self._fetch.in_flight = None
        if not self.cache.is_current(ticket.generation) or ticket.search != self.search:
            LOGGER.debug("Dropping stale page %d", ticket.page)
            return False
        self.cache.append_page(ticket.page, [FeedNote.from_row(r) for r in rows])
        self._fetch.last_page_size = len(rows)
        self._fetch.pages_fetched = max(self._fetch.pages_fetched, ticket.page)
        return True

    def fail(self, ticket: PageTicket, exc: BaseException) -> None:
        if self._fetch.in_flight == ticket:
            self._fetch.in_flight = None
        self._fetch.last_error = exc
        LOGGER.warning("Fetching page %d failed: %s", ticket.page, exc)

    @property
    def last_error(self) -> Optional[BaseException]:
        return self._fetch.last_error

    def fetch_next_page(self) -> bool:
        ticket = self.begin_next_page()
        if ticket is None:
            return False
        try:
            rows = self.fetch_page(ticket.page, ticket.search)
        except Exception as exc:
            self.fail(ticket, exc)
            raise
        return self.complete(ticket, rows)

    def on_sentinel_visible(self) -> bool:
        """The off-screen sentinel scrolled into view."""
        if not self.has_next_page or self.is_fetching_next_page:
            return False
        return self.fetch_next_page()

    def set_search(self, query: Optional[str]) -> None:
        query = query.strip() if query and query.strip() else None
        if query == self.search:
            return
        self.search = query
        LOGGER.info("Search changed to %r", query)
        self.refresh()

    # ----- View -----

    def view(self, now: Optional[datetime] = None, clock_now: Optional[float] = None) -> FeedView:
        settled = self.deleted.settled(clock_now)
        hidden = self.deleted.hidden
        buckets: Dict[str, List[FeedItem]] = {}
        for note in self.cache.flatten():
            if note.key in settled:
                continue
            label = day_label(note.created_at, now, self.tz)
            buckets.setdefault(label, []).append(
                FeedItem(note, is_exiting=note.key in hidden)
            )
        groups = [
            DayGroup(label=label, items=items, badge=count_badge(len(items), self.page_size))
            for label, items in buckets.items()
        ]

        empty = not groups
        return FeedView(
            groups=groups,
            has_next_page=self.has_next_page,
            is_fetching_next_page=self.is_fetching_next_page,
            show_placeholder=empty and not self._has_pending_create(),
        )
