"""
Minimal markdown to HTML conversion for assistant messages.

Supported: ``#``/``##``/``###`` headings, ``* `` and ``1. `` lists (not
nested), ``---`` rules, ``**bold**`` and paragraphs. ``<`` and ``>`` are
escaped before any tag is produced, so model text can never inject markup.
"""

from __future__ import annotations

import re
from typing import Optional

__all__ = ["markdown_to_html"]

_UL_ITEM = re.compile(r"^\* ")
_OL_ITEM = re.compile(r"^\d+\.\s")
_ITEM_PATTERNS = {"ul": _UL_ITEM, "ol": _OL_ITEM}
_EMPTY_PARAGRAPH = re.compile(r"<p>\s*</p>")
_BOLD = re.compile(r"\*\*(.*?)\*\*")

_PARAGRAPH_BREAK = "\n"


def markdown_to_html(text: Optional[str]) -> str:
    """
    Render *text* as HTML.

    >>> markdown_to_html("* a\\n* b\\nplain")
    '<ul><li>a</li><li>b</li></ul><p>plain</p>'
    """
    if not text:
        return ""

    escaped = text.replace("<", "&lt;").replace(">", "&gt;")

    parts: list[str] = []
    open_list: Optional[str] = None

    def close_list() -> None:
        nonlocal open_list
        if open_list:
            parts.append(f"</{open_list}>")
            open_list = None

    def start_list(kind: str) -> None:
        nonlocal open_list
        if open_list != kind:
            close_list()
            parts.append(f"<{kind}>")
            open_list = kind

    for line in escaped.split("\n"):
        if open_list and not _ITEM_PATTERNS[open_list].match(line):
            close_list()

        if line.strip() == "---":
            parts.append("<hr/>")
        elif line.startswith("### "):
            parts.append(f"<h3>{line[4:]}</h3>")
        elif line.startswith("## "):
            parts.append(f"<h2>{line[3:]}</h2>")
        elif line.startswith("# "):
            parts.append(f"<h1>{line[2:]}</h1>")
        elif _UL_ITEM.match(line):
            start_list("ul")
            parts.append(f"<li>{line[2:]}</li>")
        elif _OL_ITEM.match(line):
            start_list("ol")
            parts.append(f"<li>{_OL_ITEM.sub('', line, count=1)}</li>")
        elif line.strip():
            parts.append(f"<p>{line}</p>")
        elif parts and parts[-1] != _PARAGRAPH_BREAK:
            parts.append(_PARAGRAPH_BREAK)

    close_list()

    html = _EMPTY_PARAGRAPH.sub("", "".join(parts))
    return _BOLD.sub(r"<strong>\1</strong>", html)
