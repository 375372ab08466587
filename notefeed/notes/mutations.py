"""
Optimistic create/update/delete against the gateway.

Create shows the note at the head of the first page before the server
answers. The row keeps its temporary id for its whole life in the cache;
server calls for it go through the reconciliation map instead.

Update writes the cache only after the server accepted the change. Delete
hides the row at once, waits out an undo window and only then calls the
server.
"""

from __future__ import annotations

import itertools
import logging
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, List, Optional

import requests

from ..config import DeleteFailurePolicy
from ..gateway.client import NotesError
from .cache import InfiniteNotesCache
from .domain import FeedNote, NoteRef, Pending
from .images import DEFAULT_BUCKET, referenced_files
from .notify import LoggingNotifier, Notifier
from .reconcile import NoteNotSynced, ReconciliationMap
from .state import DeletedIds
from .text import strip_html
from .tracker import MutationKind, MutationTracker
from .undo import ScheduledDelete, UndoQueue

if TYPE_CHECKING:  # pragma: no cover - import for type checking only
    from ..gateway.client import NotesGatewayClient
    from .editor import NoteEditor

LOGGER = logging.getLogger(__name__)

REMOTE_ERRORS = (NotesError, requests.RequestException)

CREATE_FAILED = "Failed to create note, something went wrong"
UPDATE_FAILED = "Failed to update note, something went wrong"
DELETE_FAILED = "Failed to delete note, something went wrong"
NOT_SYNCED = "This note is still being saved, try again in a moment"


def has_body(content: str) -> bool:
    """A draft is submittable when it has visible text or an image."""
    return bool(strip_html(content)) or "<img" in (content or "")


class NoteMutations:
    def __init__(
        self,
        gateway: "NotesGatewayClient",
        cache: InfiniteNotesCache,
        *,
        tracker: Optional[MutationTracker] = None,
        deleted: Optional[DeletedIds] = None,
        undo: Optional[UndoQueue] = None,
        notifier: Optional[Notifier] = None,
        page_size: int = 16,
        bucket: str = DEFAULT_BUCKET,
        delete_failure: DeleteFailurePolicy = DeleteFailurePolicy.KEEP_HIDDEN,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._gateway = gateway
        self.cache = cache
        self.tracker = tracker if tracker is not None else MutationTracker()
        self.deleted = deleted if deleted is not None else DeletedIds()
        self.undo = undo if undo is not None else UndoQueue()
        self.notifier = notifier or LoggingNotifier()
        self.page_size = page_size
        self.bucket = bucket
        self.delete_failure = delete_failure
        self._now = now
        self._temp_seq = itertools.count()
        self._last_temp_id: Optional[str] = None

    # ----- Identifiers -----

    def reconciliation(self) -> ReconciliationMap:
        return ReconciliationMap.from_mutations(self.tracker)

    def resolve(self, ref: NoteRef) -> str:
        return self.reconciliation().resolve(ref)

    def _new_temp_id(self) -> str:
        temp_id = f"optimistic-{time.time_ns() // 1_000_000}"
        if temp_id == self._last_temp_id or self.cache.find(temp_id) is not None:
            temp_id = f"{temp_id}-{next(self._temp_seq)}"
        self._last_temp_id = temp_id
        return temp_id

    # ----- Create -----

    def create(self, content: str, editor: Optional["NoteEditor"] = None) -> Optional[FeedNote]:
        """
        Insert optimistically, then persist.

        Returns the optimistic row on success, None when the server rejected
        the insert (the cache is then back to its pre-insert state and the
        draft is put back into ``editor``).
        """
        if not has_body(content):
            raise ValueError("Refusing to create an empty note")

        temp_id = self._new_temp_id()
        mutation = self.tracker.start(MutationKind.CREATE, temp_id, content=content)

        self.cache.cancel()
        previous = self.cache.snapshot()
        note = FeedNote(
            ref=Pending(temp_id),
            content=content,
            created_at=self._now(),
            created_by="",
        )
        self.cache.prepend(note)
        if editor is not None:
            editor.set_pending(True)
            editor.clear()

        try:
            row = self._gateway.insert(content)
        except REMOTE_ERRORS as exc:
            LOGGER.warning("Create %s failed: %s", temp_id, exc)
            self.tracker.fail(mutation, exc)
            self.cache.restore(previous)
            self.notifier.error(CREATE_FAILED)
            if editor is not None:
                editor.set_pending(False)
                editor.restore_draft(content)
            return None

        self.tracker.succeed(mutation, row)
        LOGGER.info("Note %s saved as %s", temp_id, row.id)
        if editor is not None:
            editor.set_pending(False)
            try:
                editor.reset()
            except REMOTE_ERRORS as exc:
                LOGGER.warning("Could not remove discarded images: %s", exc)
        return note

    # ----- Update -----

    def update(self, ref: NoteRef, content: str) -> bool:
        key = ref.key
        mutation = self.tracker.start(MutationKind.UPDATE, key, content=content)
        try:
            note_id = self.resolve(ref)
            row = self._gateway.update(note_id, content)
        except NoteNotSynced as exc:
            self.tracker.fail(mutation, exc)
            self.notifier.error(NOT_SYNCED)
            return False
        except REMOTE_ERRORS as exc:
            LOGGER.warning("Update of %s failed: %s", key, exc)
            self.tracker.fail(mutation, exc)
            self.notifier.error(UPDATE_FAILED)
            return False

        self.tracker.succeed(mutation, row)
        if not self.cache.replace_content(key, content, self.page_size):
            LOGGER.debug("Updated note %s is not in the cache", key)
        return True

    # ----- Delete -----

    def schedule_delete(self, ref: NoteRef, content: Optional[str] = None) -> ScheduledDelete:
        """Hide the row now; the server call waits for the undo window."""
        if content is None:
            cached = self.cache.find(ref.key)
            content = cached.content if cached is not None else ""
        self.deleted.hide(ref.key)
        entry = self.undo.schedule(ref, content)
        self.notifier.info("Note deleted", action="Undo")
        return entry

    def undo_delete(self, key: str) -> bool:
        entry = self.undo.cancel(key)
        if entry is None:
            return False
        self.deleted.restore(key)
        LOGGER.info("Delete of %s undone", key)
        return True

    def dismiss(self, key: str) -> bool:
        """The notification closed early: commit that delete now."""
        entry = self.undo.pop(key)
        if entry is None:
            return False
        return self._commit_delete(entry)

    def flush_deletes(self, now: Optional[float] = None) -> List[str]:
        """Commit every delete whose undo window has passed."""
        committed = []
        for entry in self.undo.due(now):
            if self._commit_delete(entry):
                committed.append(entry.key)
        return committed

    def _commit_delete(self, entry: ScheduledDelete) -> bool:
        mutation = self.tracker.start(MutationKind.DELETE, entry.key)
        try:
            note_id = self.resolve(entry.ref)
            self._gateway.delete(note_id)
        except (NoteNotSynced,) + REMOTE_ERRORS as exc:
            LOGGER.warning("Delete of %s failed: %s", entry.key, exc)
            self.tracker.fail(mutation, exc)
            self.notifier.error(DELETE_FAILED)
            if self.delete_failure is DeleteFailurePolicy.RESTORE:
                self.deleted.restore(entry.key)
            return False

        self.tracker.succeed(mutation, note_id)
        # the row is gone for good; nothing needs to keep hiding it
        self.cache.remove(entry.key, self.page_size)
        self.deleted.restore(entry.key)
        files = referenced_files(entry.content, self.bucket)
        if files:
            try:
                self._gateway.remove(self.bucket, sorted(files))
            except REMOTE_ERRORS as exc:
                LOGGER.warning("Could not remove images of %s: %s", note_id, exc)
        return True
