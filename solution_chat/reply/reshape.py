"""Deterministic reformatting of model output into the house text style.

Markdown headings and list markers are flattened, every sentence gets its
own line and long replies are split into paragraphs of bounded length.
"""

from __future__ import annotations

import re
import unicodedata

BULLET = "・"
SENTENCE_TERMINATORS = "。！？"
WRAP_THRESHOLD = 600
CHUNK_WIDTH = 400

# Punctuation after which a spaceless run may be cut.
_SOFT_BREAKS = "。！？、"
_ZWJ = "\u200d"

_HEADING_RE = re.compile(r"^#{1,6}[^\S\n]*", re.MULTILINE)
# "1." followed by a digit is a decimal ("1.5倍"), not a list marker.
_ORDERED_RE = re.compile(r"^[^\S\n]*[0-9]+[).、](?![0-9])[^\S\n]*", re.MULTILINE)
_UNORDERED_RE = re.compile(r"^[^\S\n]*[-*][^\S\n]+", re.MULTILINE)
_SENTENCE_END_RE = re.compile(f"([{SENTENCE_TERMINATORS}])(?=[^\\n])")
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def _is_attached(ch: str) -> bool:
    """True for characters that must stay with the preceding codepoint."""
    return ch == _ZWJ or unicodedata.category(ch) in ("Mn", "Mc", "Me")


def _whitespace_cut(line: str, floor: int, end: int) -> int | None:
    """Index of the last whitespace in ``line[floor + 1 : end + 1]``."""
    for k in range(min(end, len(line) - 1), floor, -1):
        if line[k].isspace():
            return k
    return None


def _soft_cut(line: str, start: int, floor: int, end: int) -> int:
    """Cut position for a window with no usable whitespace.

    Prefers the position right after the last sentence or clause mark past
    ``floor``; otherwise cuts at ``end`` without separating a combining
    sequence.
    """
    for j in range(end - 1, floor - 1, -1):
        if line[j] in _SOFT_BREAKS:
            return j + 1
    cut = end
    while cut > start + 1 and (_is_attached(line[cut]) or line[cut - 1] == _ZWJ):
        cut -= 1
    return cut


def _wrap_line(line: str, width: int = CHUNK_WIDTH) -> list[str]:
    """Split one line into trimmed pieces of at most ``width`` characters."""
    pieces: list[str] = []
    start = 0
    length = len(line)
    while start < length:
        if length - start <= width:
            pieces.append(line[start:])
            break
        end = start + width
        # Every chunk but the last keeps at least a quarter of the width.
        floor = start + width // 4
        cut = _whitespace_cut(line, floor, end)
        if cut is not None:
            pieces.append(line[start:cut])
            start = cut + 1
            continue
        cut = _soft_cut(line, start, floor, end)
        pieces.append(line[start:cut])
        start = cut
    return [piece.strip() for piece in pieces if piece.strip()]


def wrap_paragraphs(text: str, width: int = CHUNK_WIDTH) -> str:
    """Re-wrap ``text`` into chunks of at most ``width`` characters.

    Each chunk becomes its own paragraph (separated by a blank line).
    Nothing is dropped except whitespace at chunk edges.
    """
    chunks: list[str] = []
    for line in text.split("\n"):
        chunks.extend(_wrap_line(line, width))
    return "\n\n".join(chunks)


def reshape(text: str) -> str:
    """Convert raw model text into the corporate reply style.

    Steps (order matters):

    1. strip ``#`` heading markers at line start;
    2. ordered-list markers (``1.``, ``1)``, ``1、``) become ``・ ``;
    3. unordered markers (``-``, ``*``) become ``・ ``;
    4. break the line after every ``。！？`` not already followed by one;
    5. collapse three or more newlines into a single blank line;
    6. texts over 600 characters are wrapped into ≤400-character paragraphs;
    7. strip trailing whitespace per line;
    8. strip the whole text.

    Not idempotent for digits after a terminator: step 4 moves
    ``2024、`` to a line start, where a second pass reads it as a list
    marker.
    """
    if not text:
        return ""

    text = _HEADING_RE.sub("", text)
    text = _ORDERED_RE.sub(f"{BULLET} ", text)
    text = _UNORDERED_RE.sub(f"{BULLET} ", text)
    text = _SENTENCE_END_RE.sub("\\1\n", text)
    text = _BLANK_RUN_RE.sub("\n\n", text)
    if len(text) > WRAP_THRESHOLD:
        text = wrap_paragraphs(text)
    text = "\n".join(line.rstrip() for line in text.split("\n"))
    return text.strip()
