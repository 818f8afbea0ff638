"""Overridable heuristics used when content does not say something explicitly.

Each policy is a plain method. Callers swap one out by passing a replacement
callable with the same arguments, e.g.::

    ContentPolicies(settings, estimate_minutes=lambda body: 10)
"""

from __future__ import annotations

import math
from typing import Any, Callable, List, Optional

from .config import PipelineSettings

EMPTY_PAGE_CONTENT = "Content will be available soon."


class ContentPolicies:
    """Named fallback heuristics (time, difficulty, summaries, takeaways)."""

    POLICY_NAMES = (
        "estimate_minutes",
        "format_estimated_time",
        "default_difficulty",
        "default_summary",
        "generic_key_points",
        "page_takeaway",
        "missing_takeaway",
        "empty_page_takeaway",
    )

    def __init__(self, settings: Optional[PipelineSettings] = None, **overrides: Callable[..., Any]):
        self.settings = settings or PipelineSettings()
        for name, func in overrides.items():
            if name not in self.POLICY_NAMES:
                valid = ", ".join(self.POLICY_NAMES)
                raise ValueError(f"Unknown policy '{name}'. Valid options: {valid}")
            if not callable(func):
                raise TypeError(f"Policy '{name}' must be callable")
            setattr(self, name, func)

    def estimate_minutes(self, body: str) -> int:
        """Length-proportional estimate; a heuristic, not a reading-speed model."""
        params = self.settings.time_estimate
        units = math.ceil(len(body or "") / params.chars_per_unit)
        return max(params.min_minutes, units * params.minutes_per_unit)

    def format_estimated_time(self, minutes: int) -> str:
        return f"{minutes} minutes"

    def default_difficulty(self, title: str, body: str) -> str:
        return self.settings.default_difficulty

    def default_summary(self, title: str) -> str:
        return f"Learn about {title}"

    def generic_key_points(self, title: str) -> List[str]:
        return [
            f"Understand the core concepts of {title}",
            f"Apply {title} principles to practical problems",
            f"Recognize how {title} connects to related topics",
        ]

    def page_takeaway(self, title: str, index: int, total: int) -> str:
        """Takeaway for page ``index`` (0-based) out of ``total`` pages."""
        if index < total - 1:
            return f"Continue to Part {index + 2} to build on what you learned about {title}."
        return f"This section completes the key concepts of {title}."

    def missing_takeaway(self, page_title: str) -> str:
        return f"This section completes your understanding of {page_title}."

    def empty_page_takeaway(self, title: str) -> str:
        return f"Key ideas for {title} will appear here once content is available."


__all__ = ["ContentPolicies", "EMPTY_PAGE_CONTENT"]
