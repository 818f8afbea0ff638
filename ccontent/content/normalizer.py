"""Compose sections, pages and key points into canonical Subsection records."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ccontent.core.config import PipelineSettings
from ccontent.core.policies import EMPTY_PAGE_CONTENT, ContentPolicies
from ccontent.core.validation import ValidationFailure, find_duplicate_ids
from ccontent.utils.text import slugify

from .fields import KEY_POINTS_RE, SUMMARY_RE, extract_fields, find_summary
from .key_points import extract_key_points
from .models import Difficulty, Page, Section, Subsection
from .paginator import paginate, part_title
from .segmenter import has_headings, segment_headings

LOGGER = logging.getLogger(__name__)

TEXT_KEYS = ("generatedMarkdown", "generated_markdown", "markdown", "content", "explanation", "body")


def _resolve(
    settings: Optional[PipelineSettings], policies: Optional[ContentPolicies]
) -> Tuple[PipelineSettings, ContentPolicies]:
    if settings is None:
        settings = policies.settings if policies is not None else PipelineSettings()
    return settings, policies or ContentPolicies(settings)


def _first(entry: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = entry.get(key)
        if value not in (None, "", [], {}):
            return value
    return None


def _present(entry: Mapping[str, Any], *keys: str) -> Tuple[bool, Any]:
    """Return ``(True, value)`` for the first key that exists, empty values included."""
    for key in keys:
        if key in entry and entry[key] is not None:
            return True, entry[key]
    return False, None


def assign_id(explicit: Any, title: str, module_id: str, index: int) -> str:
    """Explicit id, else title slug, else ``subsection-{module_id}-{index}``."""
    if explicit is not None and str(explicit).strip():
        return str(explicit).strip()
    slug = slugify(title)
    if slug:
        return slug
    return f"subsection-{module_id}-{index}"


def resolve_duplicate_ids(subsections: Sequence[Subsection], mode: str = "suffix") -> List[Subsection]:
    """Make ids unique within one list.

    ``suffix`` appends ``-2``, ``-3``... to later duplicates; ``reject`` raises
    ValidationFailure naming them.
    """
    duplicates = find_duplicate_ids([subsection.id for subsection in subsections])
    if not duplicates:
        return list(subsections)
    if mode == "reject":
        raise ValidationFailure([f"Duplicate subsection ids: {duplicates}"])

    LOGGER.warning("Duplicate subsection ids %s; appending positional suffixes", duplicates)
    taken = {subsection.id for subsection in subsections}
    seen: set[str] = set()
    result: List[Subsection] = []
    for subsection in subsections:
        if subsection.id not in seen:
            seen.add(subsection.id)
            result.append(subsection)
            continue
        counter = 2
        while f"{subsection.id}-{counter}" in taken:
            counter += 1
        new_id = f"{subsection.id}-{counter}"
        taken.add(new_id)
        seen.add(new_id)
        result.append(subsection.model_copy(update={"id": new_id}))
    return result


def coerce_key_points(value: Any, limit: int) -> List[str]:
    if isinstance(value, str):
        value = value.split("\n")
    if not isinstance(value, Iterable):
        return []
    points = [str(item).strip() for item in value if item is not None and str(item).strip()]
    return points[:limit]


def coerce_pages(entries: Sequence[Any], title: str, policies: ContentPolicies) -> List[Page]:
    """Renumber already-structured pages and fill missing titles/takeaways."""
    usable = [entry for entry in entries if isinstance(entry, (Page, Mapping, str))]
    if len(usable) != len(entries):
        LOGGER.warning("Dropped %d malformed page entries for %r", len(entries) - len(usable), title)
    total = len(usable)
    pages: List[Page] = []
    for position, entry in enumerate(usable, start=1):
        if isinstance(entry, Page):
            pages.append(entry.model_copy(update={"page_number": position}))
            continue
        if isinstance(entry, str):
            entry = {"content": entry}
        page_title = str(_first(entry, "pageTitle", "page_title", "title") or part_title(title, position, total))
        content = str(_first(entry, "content", "text", "body") or EMPTY_PAGE_CONTENT)
        takeaway = _first(entry, "keyTakeaway", "key_takeaway")
        pages.append(
            Page(
                page_number=position,
                page_title=page_title,
                content=content,
                key_takeaway=str(takeaway) if takeaway else policies.missing_takeaway(page_title),
            )
        )
    return pages


def build_subsection(
    title: str,
    *,
    pages: List[Page],
    key_points: List[str],
    summary: str,
    body: str,
    module_id: str,
    index: int,
    explicit_id: Any = None,
    difficulty: Any = None,
    estimated_time: Any = None,
    policies: ContentPolicies,
) -> Subsection:
    default_difficulty = policies.default_difficulty(title, body)
    if not estimated_time:
        estimated_time = policies.format_estimated_time(policies.estimate_minutes(body))
    return Subsection(
        id=assign_id(explicit_id, title, module_id, index),
        title=title,
        summary=summary,
        key_points=key_points[: policies.settings.max_key_points],
        pages=pages,
        difficulty=Difficulty.coerce(difficulty, default=default_difficulty),
        estimated_time=str(estimated_time),
    )


def _looks_structured(text: str, settings: PipelineSettings) -> bool:
    return bool(SUMMARY_RE.search(text) or KEY_POINTS_RE.search(text) or has_headings(text, settings))


def subsection_from_section(
    section: Section,
    *,
    module_id: str,
    index: int,
    settings: Optional[PipelineSettings] = None,
    policies: Optional[ContentPolicies] = None,
) -> Subsection:
    settings, policies = _resolve(settings, policies)
    return build_subsection(
        section.title,
        pages=paginate(section.body, section.title, settings, policies),
        key_points=extract_key_points(section.body, settings),
        summary=find_summary(section.body) or policies.default_summary(section.title),
        body=section.body,
        module_id=module_id,
        index=index,
        policies=policies,
    )


def normalize_subsection(
    entry: Mapping[str, Any] | Section | Subsection,
    *,
    module_id: str = "module",
    index: int = 0,
    settings: Optional[PipelineSettings] = None,
    policies: Optional[ContentPolicies] = None,
) -> Subsection:
    """Normalize one subsection from a Section, a Subsection or a loose mapping.

    Mappings that already carry ``pages`` keep them (renumbered, defaults
    filled in); otherwise pages are built from the first text field found.
    """
    settings, policies = _resolve(settings, policies)
    if isinstance(entry, Subsection):
        return entry
    if isinstance(entry, Section):
        return subsection_from_section(entry, module_id=module_id, index=index, settings=settings, policies=policies)
    if not isinstance(entry, Mapping):
        raise TypeError(f"Cannot normalize subsection from {type(entry).__name__}")

    title = str(_first(entry, "title", "name") or f"Subsection {index + 1}").strip()
    body = str(_first(entry, *TEXT_KEYS) or "")
    existing_pages = entry.get("pages")
    explicit_points = _first(entry, "keyPoints", "key_points", "keyLearningPoints")
    explicit_summary = _first(entry, "summary", "description")

    if isinstance(existing_pages, Sequence) and not isinstance(existing_pages, str) and existing_pages:
        # Already-structured record: present fields are kept as-is, even when empty.
        pages = coerce_pages(existing_pages, title, policies)
        if not body:
            body = "\n\n".join(page.content for page in pages if page.content != EMPTY_PAGE_CONTENT)
        has_summary, stored_summary = _present(entry, "summary", "description")
        summary = str(stored_summary or "") if has_summary else policies.default_summary(title)
        has_points, stored_points = _present(entry, "keyPoints", "key_points", "keyLearningPoints")
        if has_points:
            key_points = coerce_key_points(stored_points or [], settings.max_key_points)
        else:
            key_points = extract_key_points(body, settings)
    elif _looks_structured(body, settings):
        fields = extract_fields(body, title, settings, policies)
        pages = fields.pages
        summary = explicit_summary or fields.summary
        key_points = coerce_key_points(explicit_points, settings.max_key_points) or fields.key_points
    else:
        pages = paginate(body, title, settings, policies)
        summary = explicit_summary or policies.default_summary(title)
        key_points = coerce_key_points(explicit_points, settings.max_key_points) or extract_key_points(body, settings)

    if not pages:
        pages = paginate("", title, settings, policies)

    return build_subsection(
        title,
        pages=pages,
        key_points=key_points,
        summary=str(summary),
        body=body,
        module_id=module_id,
        index=index,
        explicit_id=entry.get("id"),
        difficulty=_first(entry, "difficulty", "complexity", "difficultyLevel"),
        estimated_time=_first(entry, "estimatedTime", "estimated_time"),
        policies=policies,
    )


def normalize_subsections(
    entries: Iterable[Mapping[str, Any] | Section | Subsection],
    *,
    module_id: str = "module",
    settings: Optional[PipelineSettings] = None,
    policies: Optional[ContentPolicies] = None,
) -> List[Subsection]:
    settings, policies = _resolve(settings, policies)
    subsections = [
        normalize_subsection(entry, module_id=module_id, index=index, settings=settings, policies=policies)
        for index, entry in enumerate(entries)
    ]
    return resolve_duplicate_ids(subsections, settings.duplicate_ids)


def parse_module_markdown(
    markdown: str | None,
    module_id: str = "module",
    settings: Optional[PipelineSettings] = None,
    policies: Optional[ContentPolicies] = None,
) -> List[Subsection]:
    """Segment module markdown on the heading marker and normalize each section."""
    settings, policies = _resolve(settings, policies)
    sections = segment_headings(markdown, settings)
    return normalize_subsections(sections, module_id=module_id, settings=settings, policies=policies)


def parse_subsection_markdown(
    markdown: str | None,
    title: str,
    *,
    subsection_id: Optional[str] = None,
    module_id: str = "module",
    index: int = 0,
    difficulty: Any = None,
    estimated_time: Optional[str] = None,
    settings: Optional[PipelineSettings] = None,
    policies: Optional[ContentPolicies] = None,
) -> Subsection:
    """Build one Subsection from generated labeled-block markdown."""
    settings, policies = _resolve(settings, policies)
    body = markdown or ""
    fields = extract_fields(body, title, settings, policies)
    return build_subsection(
        title,
        pages=fields.pages,
        key_points=fields.key_points,
        summary=fields.summary,
        body=body,
        module_id=module_id,
        index=index,
        explicit_id=subsection_id,
        difficulty=difficulty,
        estimated_time=estimated_time,
        policies=policies,
    )


def subsection_payloads(subsections: Iterable[Subsection]) -> List[Dict[str, Any]]:
    return [subsection.to_payload() for subsection in subsections]


__all__ = [
    "assign_id",
    "build_subsection",
    "coerce_pages",
    "normalize_subsection",
    "normalize_subsections",
    "parse_module_markdown",
    "parse_subsection_markdown",
    "resolve_duplicate_ids",
    "subsection_from_section",
    "subsection_payloads",
]
