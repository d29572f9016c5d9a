"""Split a reply into display blocks the way the chat widget renders it.

Lines starting with the bullet glyph are list items, a paragraph wrapped
entirely in ``**`` is a subheading, other lines group into paragraphs and
blank lines end the current block. The CTA marker is removed and reported
as ``show_contact``. Inline ``**bold**`` inside block text is split out by
:func:`inline_spans`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from solution_chat.reply.cta import CTA_MARKER
from solution_chat.reply.reshape import BULLET

_HEADING_RE = re.compile(r"^\*\*(.+)\*\*$")
_INLINE_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_SEPARATOR = "---"


@dataclass(frozen=True)
class ReplyBlock:
    kind: str  # "paragraph", "list" or "heading"
    items: tuple[str, ...]


@dataclass(frozen=True)
class RenderedReply:
    blocks: list[ReplyBlock]
    show_contact: bool = False


def parse_reply_blocks(text: str) -> RenderedReply:
    """Parse reply text into paragraph, list and heading blocks."""
    show_contact = CTA_MARKER in text
    lines = text.replace(CTA_MARKER, "").strip().split("\n")
    if show_contact and lines and lines[-1].strip() == _SEPARATOR:
        lines = lines[:-1]

    blocks: list[ReplyBlock] = []
    paragraph: list[str] = []
    items: list[str] = []

    def flush_paragraph() -> None:
        if not paragraph:
            return
        content = " ".join(paragraph)
        match = _HEADING_RE.match(content)
        if match:
            blocks.append(ReplyBlock(kind="heading", items=(match.group(1),)))
        else:
            blocks.append(ReplyBlock(kind="paragraph", items=(content,)))
        paragraph.clear()

    def flush_list() -> None:
        if not items:
            return
        blocks.append(ReplyBlock(kind="list", items=tuple(items)))
        items.clear()

    for raw in lines:
        line = raw.strip()
        if not line:
            flush_paragraph()
            flush_list()
        elif line.startswith(BULLET):
            flush_paragraph()
            item = line[len(BULLET) :]
            items.append(item[1:] if item.startswith(" ") else item)
        else:
            flush_list()
            paragraph.append(line)

    flush_list()
    flush_paragraph()
    return RenderedReply(blocks=blocks, show_contact=show_contact)


def inline_spans(text: str) -> list[tuple[str, bool]]:
    """Split ``text`` into ``(segment, bold)`` pairs on ``**...**`` runs.

    Unpaired asterisks stay in the plain text.
    """
    spans: list[tuple[str, bool]] = []
    pos = 0
    for match in _INLINE_BOLD_RE.finditer(text):
        if match.start() > pos:
            spans.append((text[pos : match.start()], False))
        spans.append((match.group(1), True))
        pos = match.end()
    if pos < len(text):
        spans.append((text[pos:], False))
    return spans
