"""Split raw markdown into titled sections on a fixed heading marker."""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Set, Tuple

from ccontent.core.config import PipelineSettings
from ccontent.utils.text import normalize_newlines

from .models import Section

LOGGER = logging.getLogger(__name__)

INTRODUCTION_TITLE = "Introduction"
WHOLE_CONTENT_TITLE = "Content"
FENCE_RE = re.compile(r"^\s*(`{3,}|~{3,})")


def fenced_lines(lines: List[str]) -> Set[int]:
    """Indices of lines inside closed code fences.

    A fence closes only on the same character repeated at least as often as
    the opener. An opener that is never closed does not hide later lines.
    """
    inside: Set[int] = set()
    opener: Optional[str] = None
    start = 0
    for index, line in enumerate(lines):
        match = FENCE_RE.match(line)
        if opener is None:
            if match:
                opener, start = match.group(1), index
        elif match and match.group(1)[0] == opener[0] and len(match.group(1)) >= len(opener):
            inside.update(range(start, index + 1))
            opener = None
    return inside


def heading_pattern(marker: str) -> re.Pattern[str]:
    """Match ``marker`` followed by non-marker text; the title is group 1."""
    return re.compile(rf"^{re.escape(marker)}(?!{re.escape(marker[-1])})[ \t]*(\S.*?)\s*$")


def _scan(text: str, marker: str) -> Tuple[List[str], List[Tuple[str, List[str]]]]:
    pattern = heading_pattern(marker)
    preamble: List[str] = []
    sections: List[Tuple[str, List[str]]] = []
    lines = text.split("\n")
    fenced = fenced_lines(lines)

    for index, line in enumerate(lines):
        match = None if index in fenced else pattern.match(line)
        if match:
            sections.append((match.group(1).strip(), []))
        elif sections:
            sections[-1][1].append(line)
        else:
            preamble.append(line)
    return preamble, sections


def has_headings(markdown: str | None, settings: Optional[PipelineSettings] = None) -> bool:
    settings = settings or PipelineSettings()
    _, sections = _scan(normalize_newlines(markdown), settings.heading_marker)
    return bool(sections)


def segment_headings(markdown: str | None, settings: Optional[PipelineSettings] = None) -> List[Section]:
    """Return the ordered sections of ``markdown``.

    Pure and total: text before the first heading becomes an "Introduction"
    section when non-blank, a heading without body still yields a section, and
    input with no heading at all comes back as one "Content" section. Blank
    input yields an empty list. Headings inside fenced code blocks are ignored.
    """

    settings = settings or PipelineSettings()
    text = normalize_newlines(markdown)
    if not text.strip():
        return []

    preamble, sections = _scan(text, settings.heading_marker)
    intro = "\n".join(preamble).strip()
    if not sections:
        LOGGER.debug("No %r headings found; returning whole input as one section", settings.heading_marker)
        return [Section(title=WHOLE_CONTENT_TITLE, body=intro)]

    result: List[Section] = []
    if intro:
        result.append(Section(title=INTRODUCTION_TITLE, body=intro))
    for title, lines in sections:
        result.append(Section(title=title, body="\n".join(lines).strip()))
    return result


__all__ = [
    "INTRODUCTION_TITLE",
    "WHOLE_CONTENT_TITLE",
    "fenced_lines",
    "has_headings",
    "heading_pattern",
    "segment_headings",
]
