"""Turning command line input into note HTML."""

import html
import mimetypes
import re
from pathlib import Path
from typing import Optional

import typer

_TAG = re.compile(r"^\s*<[a-zA-Z]")


def to_html(text: str) -> str:
    """Pass HTML through; wrap plain text lines in paragraphs."""
    if _TAG.match(text):
        return text
    lines = text.splitlines() or [""]
    return "".join(f"<p>{html.escape(line)}</p>" for line in lines)


def read_content(content: Optional[str], file: Optional[Path]) -> str:
    if content and file:
        raise typer.BadParameter("Pass either CONTENT or --file, not both")
    if file is not None:
        return to_html(file.read_text(encoding="utf-8"))
    return to_html(content or "")


def content_type_for(path: Path) -> str:
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or "application/octet-stream"
