"""Group a section's paragraphs into bounded pages with positional takeaways."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ccontent.core.config import PipelineSettings
from ccontent.core.policies import EMPTY_PAGE_CONTENT, ContentPolicies
from ccontent.utils.text import split_paragraphs

from .models import Page

LOGGER = logging.getLogger(__name__)


def part_title(title: str, part: int, total: int) -> str:
    return f"{title} - Part {part}" if total > 1 else title


def chunk_paragraphs(paragraphs: Sequence[str], size: int) -> List[List[str]]:
    return [list(paragraphs[start : start + size]) for start in range(0, len(paragraphs), size)]


def placeholder_page(title: str, policies: ContentPolicies) -> Page:
    return Page(
        page_number=1,
        page_title=title,
        content=EMPTY_PAGE_CONTENT,
        key_takeaway=policies.empty_page_takeaway(title),
    )


def build_pages(groups: Sequence[Sequence[str]], title: str, policies: ContentPolicies) -> List[Page]:
    """Turn paragraph groups into numbered pages; never returns an empty list."""
    if not groups:
        return [placeholder_page(title, policies)]
    total = len(groups)
    return [
        Page(
            page_number=index + 1,
            page_title=part_title(title, index + 1, total),
            content="\n\n".join(group),
            key_takeaway=policies.page_takeaway(title, index, total),
        )
        for index, group in enumerate(groups)
    ]


def paginate(
    body: str | None,
    title: str,
    settings: Optional[PipelineSettings] = None,
    policies: Optional[ContentPolicies] = None,
) -> List[Page]:
    """Split ``body`` into pages of at most ``paragraphs_per_page`` paragraphs.

    Empty bodies produce one placeholder page, so the result is never empty.
    """

    settings = settings or PipelineSettings()
    policies = policies or ContentPolicies(settings)
    paragraphs = split_paragraphs(body)
    if not paragraphs:
        LOGGER.debug("Empty body for %r; emitting placeholder page", title)
    return build_pages(chunk_paragraphs(paragraphs, settings.paragraphs_per_page), title, policies)


def estimate_minutes(body: str | None, policies: Optional[ContentPolicies] = None) -> int:
    """``max(5, ceil(len(body) / 250) * 3)`` with default settings; heuristic only."""
    policies = policies or ContentPolicies()
    return policies.estimate_minutes(body or "")


__all__ = [
    "build_pages",
    "chunk_paragraphs",
    "estimate_minutes",
    "paginate",
    "part_title",
    "placeholder_page",
]
