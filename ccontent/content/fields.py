"""Pull labeled fields (Summary, Key Learning Points, Key Takeaway) out of generated markdown.

Generated subsection content looks roughly like::

    **Summary:**
    One paragraph overview.

    **Key Learning Points:**
    - point one
    - point two

    #### First page
    Body text.
    **Key Takeaway:** The one thing to remember.

Any part may be missing; each field then falls back to a policy default.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import List, Optional

from ccontent.core.config import PipelineSettings
from ccontent.core.policies import EMPTY_PAGE_CONTENT, ContentPolicies
from ccontent.utils.text import is_list_item, normalize_newlines, split_paragraphs, strip_list_marker

from .models import Page
from .paginator import build_pages, chunk_paragraphs
from .segmenter import INTRODUCTION_TITLE, has_headings, segment_headings

LOGGER = logging.getLogger(__name__)

_BLOCK_END = r"(?=\n[ \t]*\n|\n[ \t]*\*\*|\n[ \t]*#{1,6}[ \t]|\Z)"


def _label(name: str) -> str:
    return rf"\*\*[ \t]*{name}[ \t]*:?[ \t]*\*\*[ \t]*:?"


SUMMARY_RE = re.compile(_label("Summary") + r"[ \t]*\n?([\s\S]*?)" + _BLOCK_END, re.IGNORECASE)
KEY_POINTS_RE = re.compile(
    _label(r"Key\s+Learning\s+Points") + r"[ \t]*\n([\s\S]*?)" + _BLOCK_END,
    re.IGNORECASE,
)
TAKEAWAY_RE = re.compile(_label(r"Key\s+Takeaway") + r"[ \t]*([\s\S]*?)(?=\n[ \t]*\n|\Z)", re.IGNORECASE)
ANY_HEADING_LINE_RE = re.compile(r"^[ \t]*#{1,6}[ \t]+\S.*$", re.MULTILINE)


@dataclass
class StructuredFields:
    """Fields recovered from one subsection's markdown, defaults applied."""

    summary: str
    key_points: List[str]
    pages: List[Page]
    summary_found: bool = False
    key_points_found: bool = False
    synthetic_pages: bool = False
    missing: List[str] = field(default_factory=list)


def find_summary(markdown: str) -> Optional[str]:
    match = SUMMARY_RE.search(markdown)
    if not match:
        return None
    summary = " ".join(line.strip() for line in match.group(1).strip().split("\n"))
    return summary or None


def find_key_points(markdown: str) -> List[str]:
    match = KEY_POINTS_RE.search(markdown)
    if not match:
        return []
    lines = [line for line in match.group(1).split("\n") if line.strip()]
    bullets = [strip_list_marker(line) for line in lines if is_list_item(line)]
    points = bullets or [line.strip() for line in lines]
    return [point for point in points if point]


def split_takeaway(body: str) -> tuple[str, Optional[str]]:
    """Return ``(content_without_clause, takeaway)`` for a page body."""
    match = TAKEAWAY_RE.search(body)
    if not match:
        return body.strip(), None
    takeaway = " ".join(match.group(1).split()) or None
    content = (body[: match.start()] + body[match.end() :]).strip()
    return content, takeaway


def strip_labeled_blocks(markdown: str) -> str:
    text = SUMMARY_RE.sub("", markdown, count=1)
    text = KEY_POINTS_RE.sub("", text, count=1)
    return text.strip()


def _is_heading_only(text: str) -> bool:
    return not ANY_HEADING_LINE_RE.sub("", text).strip()


def synthetic_pages(
    remaining: str,
    title: str,
    settings: PipelineSettings,
    policies: ContentPolicies,
) -> List[Page]:
    """Redistribute headingless content into at most ``synthetic_page_limit`` pages."""
    paragraphs = [p for p in split_paragraphs(remaining) if not _is_heading_only(p)]
    if not paragraphs:
        return build_pages([], title, policies)
    page_count = min(settings.synthetic_page_limit, len(paragraphs))
    per_page = math.ceil(len(paragraphs) / page_count)
    return build_pages(chunk_paragraphs(paragraphs, per_page), title, policies)


def heading_pages(remaining: str, settings: PipelineSettings, policies: ContentPolicies) -> List[Page]:
    sections = segment_headings(remaining, settings)
    pages: List[Page] = []
    for section in sections:
        if section.title == INTRODUCTION_TITLE and _is_heading_only(section.body):
            continue
        content, takeaway = split_takeaway(section.body)
        pages.append(
            Page(
                page_number=len(pages) + 1,
                page_title=section.title,
                content=content or EMPTY_PAGE_CONTENT,
                key_takeaway=takeaway or policies.missing_takeaway(section.title),
            )
        )
    return pages


def extract_fields(
    markdown: str | None,
    title: str,
    settings: Optional[PipelineSettings] = None,
    policies: Optional[ContentPolicies] = None,
) -> StructuredFields:
    """Extract summary, key points and pages from labeled-block markdown."""
    settings = settings or PipelineSettings()
    policies = policies or ContentPolicies(settings)
    text = normalize_newlines(markdown)
    missing: List[str] = []

    summary = find_summary(text)
    if summary is None:
        missing.append("summary")
        summary = policies.default_summary(title)

    key_points = find_key_points(text)
    key_points_found = bool(key_points)
    if not key_points_found:
        missing.append("key_points")
        key_points = policies.generic_key_points(title)

    remaining = strip_labeled_blocks(text)
    pages = heading_pages(remaining, settings, policies) if has_headings(remaining, settings) else []
    synthetic = not pages
    if synthetic:
        missing.append("pages")
        pages = synthetic_pages(remaining, title, settings, policies)

    if missing:
        LOGGER.debug("Subsection %r missing labeled fields: %s", title, ", ".join(missing))

    return StructuredFields(
        summary=summary,
        key_points=key_points[: settings.max_key_points],
        pages=pages,
        summary_found="summary" not in missing,
        key_points_found=key_points_found,
        synthetic_pages=synthetic,
        missing=missing,
    )


__all__ = [
    "StructuredFields",
    "extract_fields",
    "find_key_points",
    "find_summary",
    "split_takeaway",
    "strip_labeled_blocks",
]
