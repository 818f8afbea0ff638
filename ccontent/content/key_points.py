"""Best-effort extraction of enumerable insights from a section body.

This is a heuristic: it looks for list items and lines that mention "key" or
"important", falling back to the opening sentences. It makes no claim of
semantic correctness.
"""

from __future__ import annotations

import re
from typing import List, Optional

from ccontent.core.config import PipelineSettings
from ccontent.utils.text import is_list_item, normalize_newlines, split_sentences, strip_list_marker

KEYWORD_RE = re.compile(r"key|important", re.IGNORECASE)


def _qualifies(line: str) -> bool:
    return is_list_item(line) or KEYWORD_RE.search(line) is not None


def extract_key_points(body: str | None, settings: Optional[PipelineSettings] = None) -> List[str]:
    settings = settings or PipelineSettings()
    text = normalize_newlines(body)
    if not text.strip():
        return []

    points: List[str] = []
    for line in text.split("\n"):
        if not line.strip() or not _qualifies(line):
            continue
        point = strip_list_marker(line)
        if point:
            points.append(point)

    if not points:
        sentences = [s for s in split_sentences(text) if len(s) > settings.min_sentence_length]
        points = sentences[: settings.fallback_sentence_count]

    return points[: settings.max_key_points]


__all__ = ["extract_key_points"]
