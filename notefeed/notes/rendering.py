"""
Pure HTML rendering of a feed view. No I/O.

Rows carry data attributes a front end can key transitions on:
  - data-key        stable render key (temporary id for optimistic rows)
  - data-optimistic row not yet acknowledged; enter from zero height
  - data-exiting    row hidden by a delete; play the exit transition
"""

from __future__ import annotations

import html
from typing import Dict

from tinyhtml import h, raw

from .feed import DayGroup, FeedItem, FeedView

PLACEHOLDER_TEXT = "Things to come."

_PAGE_CSS = (
    "body{font-family:-apple-system,BlinkMacSystemFont,Segoe UI,Roboto,Helvetica,Arial,sans-serif;"
    "line-height:1.5;max-width:56rem;margin:0 auto;padding:1.75rem 1.25rem 5rem;background:#0b0b0c;color:#e8e8e8}"
    "img{max-width:100%;height:auto;border-radius:.375rem;margin:1.25rem 0}"
    "code{font-family:ui-monospace,monospace;color:#ff837f;background:#ff837f40;padding:.25rem .5rem;border-radius:.125rem}"
    "pre{white-space:pre-wrap;background:#161618;padding:1rem;border-radius:.5rem}"
    ".day-group header{display:flex;gap:.5rem;align-items:baseline;margin-top:1.75rem}"
    ".badge{font-size:.75rem;opacity:.6}"
    ".note{border:1px solid #ffffff1a;background:#161618;border-radius:1rem;padding:1rem;margin:1rem 0}"
    ".note[data-exiting]{opacity:.3}"
    ".placeholder{text-align:center;font-size:3rem;margin-top:1.25rem}"
)


def _item_attrs(item: FeedItem) -> Dict[str, str]:
    attrs = {"class": "note", "data-key": item.key}
    if item.note.is_optimistic:
        attrs["data-optimistic"] = "true"
    if item.is_exiting:
        attrs["data-exiting"] = "true"
    return attrs


def render_item(item: FeedItem):
    return h("article", **_item_attrs(item))(raw(item.note.content or ""))


def render_group(group: DayGroup):
    return h("section", **{"class": "day-group"})(
        h("header")(
            h("h2")(group.label),
            h("span", **{"class": "badge"})(group.badge),
        ),
        *[render_item(item) for item in group.items],
    )


def render_feed_fragment(view: FeedView) -> str:
    if view.show_placeholder:
        return h("h1", **{"class": "placeholder"})(PLACEHOLDER_TEXT).render()
    children = [render_group(g) for g in view.groups]
    if view.show_skeletons:
        children.append(h("div", **{"class": "skeleton", "aria-busy": "true"})())
    return h("div", **{"class": "notes-feed"})(*children).render()


def render_feed_page(view: FeedView, title: str = "Notes") -> str:
    return (
        '<!doctype html><meta charset="utf-8">'
        '<meta name="color-scheme" content="dark">'
        f"<title>{html.escape(title)}</title>"
        f"<style>{_PAGE_CSS}</style>"
        f"{render_feed_fragment(view)}"
    )
