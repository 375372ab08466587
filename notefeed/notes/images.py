"""
Image lifecycle tracking for note drafts.

The editor embeds uploaded images as ``<img src=".../public/<bucket>/<file>">``.
When an image leaves the document its storage file becomes a candidate for
removal; when it comes back it is no longer one. Candidates are removed
from the bucket in one call when the draft is discarded.
"""

from __future__ import annotations

import logging
from html.parser import HTMLParser
from typing import TYPE_CHECKING, FrozenSet, List, Optional, Set

if TYPE_CHECKING:  # pragma: no cover - import for type checking only
    from ..gateway.client import NotesGatewayClient

LOGGER = logging.getLogger(__name__)

DEFAULT_BUCKET = "files"


class _ImageSourceParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.sources: List[str] = []

    def handle_starttag(self, tag, attrs):
        if tag.lower() != "img":
            return
        for name, value in attrs:
            if name.lower() == "src" and value:
                self.sources.append(value.strip())

    handle_startendtag = handle_starttag


def extract_image_sources(html: Optional[str]) -> List[str]:
    """All non-empty ``<img src>`` values in document order."""
    if not html:
        return []
    parser = _ImageSourceParser()
    parser.feed(html)
    parser.close()
    return [s for s in parser.sources if s]


def storage_marker(bucket: str = DEFAULT_BUCKET) -> str:
    return f"/public/{bucket}/"


def file_name_from_storage_url(
    url: Optional[str], bucket: str = DEFAULT_BUCKET
) -> Optional[str]:
    """
    Storage file name for a public object URL, or None if ``url`` does not
    point into ``bucket``.
    """
    if not url:
        return None
    _, sep, tail = url.partition(storage_marker(bucket))
    if not sep or not tail:
        return None
    return tail.split("?", 1)[0].split("#", 1)[0] or None


def referenced_files(html: Optional[str], bucket: str = DEFAULT_BUCKET) -> Set[str]:
    names = set()
    for src in extract_image_sources(html):
        name = file_name_from_storage_url(src, bucket)
        if name:
            names.add(name)
    return names


class ImageLifecycleTracker:
    """Per-editor tracker of storage files that left the document."""

    def __init__(
        self,
        gateway: Optional["NotesGatewayClient"] = None,
        *,
        bucket: str = DEFAULT_BUCKET,
    ):
        self._gateway = gateway
        self.bucket = bucket
        self._previous: List[str] = []
        self._pending_delete: Set[str] = set()

    @property
    def pending_delete(self) -> FrozenSet[str]:
        return frozenset(self._pending_delete)

    @property
    def previous_sources(self) -> List[str]:
        return list(self._previous)

    def observe(self, html: Optional[str]) -> None:
        """Diff the document's images against the previous snapshot."""
        current = extract_image_sources(html)
        current_set = set(current)

        for src in self._previous:
            if src in current_set:
                continue
            name = file_name_from_storage_url(src, self.bucket)
            if name and name not in self._pending_delete:
                LOGGER.debug("Image left the document: %s", name)
                self._pending_delete.add(name)

        for src in current_set:
            name = file_name_from_storage_url(src, self.bucket)
            if name and name in self._pending_delete:
                LOGGER.debug("Image back in the document: %s", name)
                self._pending_delete.discard(name)

        self._previous = current

    def discard(self, keep_html: Optional[str] = None) -> Set[str]:
        """
        Remove every pending file from storage, then forget all state.

        Files still referenced by ``keep_html`` (for example the saved version
        of a note whose edit was cancelled) are left in place. Returns the set
        of names that were removed.
        """
        doomed = self._pending_delete - referenced_files(keep_html, self.bucket)
        if doomed:
            if self._gateway is None:
                raise RuntimeError("ImageLifecycleTracker has no gateway to remove files")
            LOGGER.info("Removing %d discarded images", len(doomed))
            self._gateway.remove(self.bucket, sorted(doomed))
        self._pending_delete.clear()
        self._previous = []
        return doomed
