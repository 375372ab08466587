"""Plain-text views of note HTML."""

from __future__ import annotations

import re
from html.parser import HTMLParser
from typing import List

EMPTY_DOCUMENT = "<p></p>"

_BLOCK_TAGS = {"p", "div", "li", "br", "h1", "h2", "h3", "h4", "h5", "h6", "pre", "blockquote"}
_WS = re.compile(r"\s+")


class _TextExtractor(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.parts: List[str] = []

    def handle_starttag(self, tag, attrs):
        if tag in _BLOCK_TAGS:
            self.parts.append("\n")

    def handle_endtag(self, tag):
        if tag in _BLOCK_TAGS:
            self.parts.append("\n")

    def handle_data(self, data):
        self.parts.append(data)


def strip_html(value: str) -> str:
    """Visible text of an HTML fragment, whitespace collapsed."""
    if not value:
        return ""
    parser = _TextExtractor()
    parser.feed(value)
    parser.close()
    return _WS.sub(" ", "".join(parser.parts)).strip()


def note_preview(value: str, width: int = 80) -> str:
    text = strip_html(value)
    if len(text) <= width:
        return text
    return text[: max(width - 1, 0)].rstrip() + "…"


def matches_query(value: str, query: str) -> bool:
    """Case-insensitive substring match on visible text only."""
    needle = (query or "").strip().casefold()
    if not needle:
        return True
    return needle in strip_html(value).casefold()


def normalize_document(value: str) -> str:
    return "" if value == EMPTY_DOCUMENT else value
