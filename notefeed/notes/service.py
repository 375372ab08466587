"""
High-level notes application facade.

Public API:
  - NotesApp.from_settings(settings) -> NotesApp
  - NotesApp.load() / load_more() / search(query)
  - NotesApp.new_editor() -> NoteEditor
  - NotesApp.create_note(content, editor=None) -> Optional[FeedNote]
  - NotesApp.start_edit(key) -> NoteEditor / cancel_edit() / save_edit(content)
  - NotesApp.update_note(ref, content) -> bool
  - NotesApp.delete_note(key) / undo_delete(key) / flush_deletes() / dismiss_delete(key)
  - NotesApp.resolve(ref) -> str
  - NotesApp.collect_garbage() -> int
  - NotesApp.view(now=None) -> FeedView
  - NotesApp.render_html(now=None) -> str
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, tzinfo
from typing import Callable, List, Optional

import requests

from ..config import Settings
from ..gateway.client import NotesGatewayClient
from .cache import InfiniteNotesCache
from .domain import FeedNote, NoteRef
from .editor import HtmlSurface, ImageTrackingEditor, NoteEditor
from .feed import FeedView, NotesFeed
from .mutations import NoteMutations
from .notify import LoggingNotifier, Notifier
from .rendering import render_feed_page
from .state import AppState, DeletedIds, Dialog
from .tracker import MutationKind, MutationTracker
from .undo import ScheduledDelete, UndoQueue

LOGGER = logging.getLogger(__name__)


class NoteNotLoaded(KeyError):
    """The key does not belong to any cached row."""


class NotesApp:
    def __init__(
        self,
        gateway: NotesGatewayClient,
        *,
        settings: Optional[Settings] = None,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], float] = time.monotonic,
        tz: Optional[tzinfo] = None,
    ):
        self.settings = settings or Settings()
        self.gateway = gateway
        self.notifier = notifier or LoggingNotifier()
        self.state = AppState(
            deleted=DeletedIds(exit_delay=self.settings.exit_delay, clock=clock)
        )
        self.cache = InfiniteNotesCache()
        self.tracker = MutationTracker()
        self.mutations = NoteMutations(
            gateway,
            self.cache,
            tracker=self.tracker,
            deleted=self.state.deleted,
            undo=UndoQueue(delay=self.settings.undo_seconds, clock=clock),
            notifier=self.notifier,
            page_size=self.settings.page_size,
            bucket=self.settings.bucket,
            delete_failure=self.settings.delete_failure,
        )
        self.feed = NotesFeed(
            gateway,
            cache=self.cache,
            deleted=self.state.deleted,
            page_size=self.settings.page_size,
            tz=tz,
            has_pending_create=lambda: bool(self.tracker.pending(MutationKind.CREATE)),
        )
        self._edit_editor: Optional[NoteEditor] = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        session: Optional[requests.Session] = None,
        notifier: Optional[Notifier] = None,
    ) -> "NotesApp":
        gateway = NotesGatewayClient.from_settings(settings, session=session)
        return cls(gateway, settings=settings, notifier=notifier)

    # -------------------------- Read path ---------------------------

    def load(self) -> FeedView:
        self.feed.refresh()
        return self.view()

    def load_more(self) -> bool:
        return self.feed.on_sentinel_visible()

    def load_all(self) -> int:
        """Keep paging until the feed is exhausted; returns pages fetched."""
        fetched = 0
        while self.feed.fetch_next_page():
            fetched += 1
        return fetched

    def search(self, query: Optional[str]) -> FeedView:
        self.feed.set_search(query)
        return self.view()

    def view(self, now: Optional[datetime] = None) -> FeedView:
        return self.feed.view(now)

    def render_html(self, now: Optional[datetime] = None) -> str:
        return render_feed_page(self.view(now))

    def find(self, key: str) -> FeedNote:
        note = self.cache.find(key)
        if note is None:
            raise NoteNotLoaded(key)
        return note

    def resolve(self, ref: NoteRef) -> str:
        return self.mutations.resolve(ref)

    # -------------------------- Create -------------------------------

    def new_editor(self, html: str = "") -> NoteEditor:
        return NoteEditor(
            HtmlSurface(html),
            config=ImageTrackingEditor(bucket=self.settings.bucket),
            gateway=self.gateway,
            notifier=self.notifier,
        )

    def create_note(
        self, content: str, editor: Optional[NoteEditor] = None
    ) -> Optional[FeedNote]:
        return self.mutations.create(content, editor)

    # -------------------------- Edit ---------------------------------

    def start_edit(self, key: str) -> NoteEditor:
        """Open the inline editor for one note; any other open edit is cancelled."""
        note = self.find(key)
        if self._edit_editor is not None and self.state.editing_key != key:
            self.cancel_edit()
        self.state.start_edit(key)
        self._edit_editor = NoteEditor(
            HtmlSurface(note.content),
            config=ImageTrackingEditor(
                bucket=self.settings.bucket, renew_id_on_reset=False
            ),
            gateway=self.gateway,
            notifier=self.notifier,
        )
        return self._edit_editor

    @property
    def edit_editor(self) -> Optional[NoteEditor]:
        return self._edit_editor

    def cancel_edit(self) -> None:
        key = self.state.editing_key
        editor = self._edit_editor
        self.state.stop_edit()
        self._edit_editor = None
        if editor is None or key is None:
            return
        note = self.cache.find(key)
        editor.reset(keep_html=note.content if note is not None else None)

    def save_edit(self, content: Optional[str] = None) -> bool:
        key = self.state.editing_key
        editor = self._edit_editor
        if key is None or editor is None:
            raise RuntimeError("No note is being edited")
        content = editor.value if content is None else content
        note = self.find(key)
        editor.set_pending(True)
        ok = self.mutations.update(note.ref, content)
        editor.set_pending(False)
        if not ok:
            return False
        self.state.stop_edit(key)
        self._edit_editor = None
        editor.reset(keep_html=content)
        return True

    def update_note(self, ref: NoteRef, content: str) -> bool:
        return self.mutations.update(ref, content)

    # -------------------------- Delete -------------------------------

    def delete_note(self, key: str) -> ScheduledDelete:
        note = self.find(key)
        if self.state.is_editing(key):
            self.cancel_edit()
        return self.mutations.schedule_delete(note.ref, note.content)

    def undo_delete(self, key: str) -> bool:
        return self.mutations.undo_delete(key)

    def dismiss_delete(self, key: str) -> bool:
        return self.mutations.dismiss(key)

    def flush_deletes(self, now: Optional[float] = None) -> List[str]:
        return self.mutations.flush_deletes(now)

    # -------------------------- Dialogs ------------------------------

    def open_image_preview(self, src: str) -> None:
        self.state.preview_image(src)

    def close_image_preview(self) -> None:
        self.state.close_preview()

    @property
    def is_image_preview_open(self) -> bool:
        return self.state.is_open(Dialog.IMAGE_PREVIEW)

    # -------------------------- Housekeeping -------------------------

    def collect_garbage(self) -> int:
        """
        Forget settled mutations (and so reconciliation entries) for rows
        nothing refers to any more.
        """
        live = set(self.cache.keys())
        live.update(self.state.deleted.hidden)
        live.update(self.mutations.undo.keys())
        if self.state.editing_key:
            live.add(self.state.editing_key)
        return self.tracker.collect(live)
