"""
Editor session around a rich text surface.

The editing engine itself is external; it only needs to satisfy
`RichTextSurface`. `NoteEditor` adds what the notes feed needs on top:
change forwarding, submit gating, image upload into the bucket and image
lifecycle tracking for drafts.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Protocol, Union

import requests
from tinyhtml import h

from ..gateway.client import NotesError
from .images import DEFAULT_BUCKET, ImageLifecycleTracker
from .notify import LoggingNotifier, Notifier
from .text import EMPTY_DOCUMENT, normalize_document, strip_html

if TYPE_CHECKING:  # pragma: no cover - import for type checking only
    from ..gateway.client import NotesGatewayClient

LOGGER = logging.getLogger(__name__)


class RichTextSurface(Protocol):
    """What the notes layer needs from a WYSIWYG engine."""

    def get_html(self) -> str: ...

    def get_text(self) -> str: ...

    def set_content(self, html: str) -> None: ...

    def clear_content(self) -> None: ...

    def set_editable(self, editable: bool) -> None: ...

    def insert_image(self, src: str) -> None: ...


class HtmlSurface:
    """
    In-memory surface holding an HTML string.

    Used by the CLI and tests in place of a browser editing engine. User
    edits (`type`, `insert_image`) call ``on_update``; programmatic
    `set_content`/`clear_content` do not, matching the engine's update hook.
    """

    def __init__(self, html: str = "", on_update: Optional[Callable[[str], None]] = None):
        self._html = html or EMPTY_DOCUMENT
        self.editable = True
        self.on_update = on_update

    def get_html(self) -> str:
        return self._html

    def get_text(self) -> str:
        return strip_html(self._html)

    def set_content(self, html: str, emit_update: bool = False) -> None:
        self._html = html or EMPTY_DOCUMENT
        if emit_update:
            self._emit()

    def clear_content(self, emit_update: bool = False) -> None:
        self.set_content(EMPTY_DOCUMENT, emit_update=emit_update)

    def set_editable(self, editable: bool) -> None:
        self.editable = editable

    def type(self, html: str) -> None:
        """Replace the document as if the user had edited it."""
        if not self.editable:
            raise RuntimeError("Editor is read-only while a request is pending")
        self.set_content(html, emit_update=True)

    def insert_image(self, src: str) -> None:
        img = h("img", src=src).render()
        base = "" if self._html == EMPTY_DOCUMENT else self._html
        self.set_content(f"{base}{img}{EMPTY_DOCUMENT}", emit_update=True)

    def _emit(self) -> None:
        if self.on_update is not None:
            self.on_update(self._html)


# --------------------------- Editor configuration ----------------------------


@dataclass(frozen=True)
class PlainEditor:
    """Editor without image uploads or tracking."""


@dataclass(frozen=True)
class ImageTrackingEditor:
    """Editor that uploads images and cleans up the ones it drops."""

    bucket: str = DEFAULT_BUCKET
    renew_id_on_reset: bool = True


EditorConfig = Union[PlainEditor, ImageTrackingEditor]


def new_editor_id() -> str:
    return secrets.token_urlsafe(15)


class NoteEditor:
    def __init__(
        self,
        surface: Optional[RichTextSurface] = None,
        *,
        config: EditorConfig = PlainEditor(),
        gateway: Optional["NotesGatewayClient"] = None,
        notifier: Optional[Notifier] = None,
        on_change: Optional[Callable[[str], None]] = None,
    ):
        self.config = config
        self.editor_id = new_editor_id()
        self._gateway = gateway
        self._notifier = notifier or LoggingNotifier()
        self._on_change = on_change
        self.value = ""

        if isinstance(config, ImageTrackingEditor):
            if gateway is None:
                raise ValueError("ImageTrackingEditor requires a gateway")
            self.tracker: Optional[ImageLifecycleTracker] = ImageLifecycleTracker(
                gateway, bucket=config.bucket
            )
        elif isinstance(config, PlainEditor):
            self.tracker = None
        else:
            raise TypeError(f"Unsupported editor config: {config!r}")

        self.surface = surface if surface is not None else HtmlSurface()
        if isinstance(self.surface, HtmlSurface):
            self.surface.on_update = self.handle_update
        # baseline snapshot of whatever the surface starts with
        self.handle_update(self.surface.get_html())

    # ----- Change flow -----

    def handle_update(self, html: str) -> None:
        self.value = normalize_document(html)
        if self._on_change is not None:
            self._on_change(self.value)
        if self.tracker is not None:
            self.tracker.observe(html)

    def can_submit(self) -> bool:
        html = self.surface.get_html()
        return len(self.surface.get_text()) > 0 or "<img" in html

    def set_pending(self, pending: bool) -> None:
        self.surface.set_editable(not pending)

    # ----- Images -----

    def upload_image(
        self, filename: str, data: bytes, *, content_type: str = "image/png"
    ) -> Optional[str]:
        """Upload into the bucket and embed it; returns the public URL."""
        if not isinstance(self.config, ImageTrackingEditor) or self._gateway is None:
            raise RuntimeError("Image uploads need an ImageTrackingEditor")
        self.surface.set_editable(False)
        try:
            path = self._gateway.upload(
                self.config.bucket,
                f"{self.editor_id}-{filename}",
                data,
                content_type=content_type,
                upsert=True,
            )
        except (NotesError, requests.RequestException) as exc:
            LOGGER.warning("Image upload failed: %s", exc)
            self.surface.set_editable(True)
            self._notifier.error("Failed to upload image, something went wrong")
            return None
        src = self._gateway.public_url(self.config.bucket, path)
        self.surface.insert_image(src)
        self.surface.set_editable(True)
        self._notifier.success("Image is uploaded")
        return src

    # ----- Lifecycle -----

    def clear(self) -> None:
        # image baseline is kept: the draft's images now belong to the new note
        self.surface.clear_content()
        self.value = ""

    def restore_draft(self, html: str) -> None:
        self.surface.set_content(html)
        self.handle_update(self.surface.get_html())

    def reset(self, keep_html: Optional[str] = None) -> None:
        """Drop discarded images from storage and start a fresh draft id."""
        if self.tracker is not None:
            self.tracker.discard(keep_html=keep_html)
        if isinstance(self.config, ImageTrackingEditor) and self.config.renew_id_on_reset:
            self.editor_id = new_editor_id()
