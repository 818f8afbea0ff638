"""Text helpers shared across the pipeline stages."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import List

BLANK_LINE_RE = re.compile(r"\n[ \t]*\n+")
SENTENCE_DELIMITERS = r"[.!?]+"
LIST_MARKER_RE = re.compile(r"^\s*(?:[-*+•]|\d+[.)])\s+")
SLUG_RE = re.compile(r"[^a-z0-9]+")


def normalize_newlines(text: str | None) -> str:
    if not text:
        return ""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_paragraphs(text: str | Sequence[str] | None) -> List[str]:
    """Split text into trimmed paragraphs on one or more blank lines.

    Sequences are split element-wise and flattened. Returns an empty list when
    the input is falsy or whitespace-only.
    """

    if not text:
        return []
    if isinstance(text, Sequence) and not isinstance(text, (str, bytes)):
        paragraphs: List[str] = []
        for item in text:
            paragraphs.extend(split_paragraphs(item))
        return paragraphs
    chunks = BLANK_LINE_RE.split(normalize_newlines(str(text)))
    return [chunk.strip() for chunk in chunks if chunk.strip()]


def split_sentences(text: str | None, *, delimiters: str = SENTENCE_DELIMITERS) -> List[str]:
    if not text:
        return []
    return [part.strip() for part in re.split(delimiters, text) if part.strip()]


def strip_list_marker(line: str) -> str:
    """Remove a leading bullet or ``1.``/``1)`` marker from a line."""
    return LIST_MARKER_RE.sub("", line, count=1).strip()


def is_list_item(line: str) -> bool:
    return LIST_MARKER_RE.match(line) is not None


def slugify(value: str | None) -> str:
    """Lowercase and collapse non-alphanumeric runs to ``-``."""
    if not value:
        return ""
    return SLUG_RE.sub("-", value.lower()).strip("-")


def truncate(text: str | None, limit: int) -> str:
    if not text:
        return ""
    return text[:limit]
