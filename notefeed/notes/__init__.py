"""Public API for the notes feed."""

from .domain import FeedNote, NoteRef, Pending, Persisted
from .editor import HtmlSurface, ImageTrackingEditor, NoteEditor, PlainEditor
from .feed import DayGroup, FeedItem, FeedView, NotesFeed
from .images import ImageLifecycleTracker
from .reconcile import NoteNotSynced, ReconciliationMap
from .service import NotesApp, NoteNotLoaded

__all__ = [
    "NotesApp",
    "NotesFeed",
    "FeedView",
    "DayGroup",
    "FeedItem",
    "FeedNote",
    "NoteRef",
    "Persisted",
    "Pending",
    "NoteEditor",
    "HtmlSurface",
    "PlainEditor",
    "ImageTrackingEditor",
    "ImageLifecycleTracker",
    "ReconciliationMap",
    "NoteNotSynced",
    "NoteNotLoaded",
]
