"""Markdown and AI-response transformation stages.

The transformation functions (segmenting, key points, pagination, field and
JSON extraction, normalization) are pure and safe to re-run on identical
input. ``SubsectionCache`` holds per-id state, and passing a file-backed
``TransformTrace`` makes a call append trace lines to disk.
"""

from __future__ import annotations

from .cache import SubsectionCache, needs_processing
from .fields import StructuredFields, extract_fields
from .json_extract import extract_json
from .key_points import extract_key_points
from .models import (
    Difficulty,
    ExtractionFailure,
    ExtractionResult,
    ExtractionSuccess,
    Page,
    PayloadKind,
    RawPayload,
    Section,
    Subsection,
)
from .normalizer import (
    normalize_subsection,
    normalize_subsections,
    parse_module_markdown,
    parse_subsection_markdown,
)
from .paginator import estimate_minutes, paginate
from .router import TransformOutcome, make_payload, transform_payload
from .segmenter import segment_headings

__all__ = [
    "Difficulty",
    "ExtractionFailure",
    "ExtractionResult",
    "ExtractionSuccess",
    "Page",
    "PayloadKind",
    "RawPayload",
    "Section",
    "StructuredFields",
    "Subsection",
    "SubsectionCache",
    "TransformOutcome",
    "estimate_minutes",
    "extract_fields",
    "extract_json",
    "extract_key_points",
    "make_payload",
    "needs_processing",
    "normalize_subsection",
    "normalize_subsections",
    "paginate",
    "parse_module_markdown",
    "parse_subsection_markdown",
    "segment_headings",
    "transform_payload",
]
