"""Typed records flowing through the content pipeline.

Field names are snake_case in Python; ``model_dump(by_alias=True)`` produces
the camelCase shape the viewer and progress tracker consume.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PayloadKind(str, Enum):
    """The three shapes of raw text the pipeline accepts."""

    MODULE_MARKDOWN = "module-markdown"
    SUBSECTION_MARKDOWN = "subsection-markdown"
    AI_RESPONSE = "ai-response"

    @classmethod
    def choices(cls) -> List[str]:
        return [member.value for member in cls]


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @classmethod
    def coerce(cls, value: Any, default: "Difficulty | str" = "intermediate") -> "Difficulty":
        """Case-insensitive lookup that falls back to ``default`` for unknown values."""
        if isinstance(value, Difficulty):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls(default)


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class RawPayload(_Record):
    """Opaque text plus the tag that decides which extractor handles it."""

    text: str
    kind: PayloadKind

    @field_validator("text", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class Section(_Record):
    title: str
    body: str = ""


class Page(_Record):
    page_number: int = Field(..., ge=1, alias="pageNumber")
    page_title: str = Field(..., alias="pageTitle")
    content: str
    key_takeaway: str = Field(default="", alias="keyTakeaway")


class Subsection(_Record):
    """A titled unit of learning content; always carries at least one page."""

    id: str
    title: str
    summary: str = ""
    key_points: List[str] = Field(default_factory=list, alias="keyPoints")
    pages: List[Page] = Field(..., min_length=1)
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    estimated_time: str = Field(default="", alias="estimatedTime")

    def to_payload(self) -> Dict[str, Any]:
        """camelCase dict for caching/display collaborators."""
        return self.model_dump(by_alias=True, mode="json")


class ExtractionSuccess(_Record):
    ok: Literal[True] = True
    value: Any
    strategy: str = Field(..., description="Name of the strategy that produced the value.")

    def unwrap(self) -> Any:
        return self.value


class ExtractionFailure(_Record):
    """Typed failure: every recovery strategy was exhausted."""

    ok: Literal[False] = False
    error_kind: str = Field(..., alias="errorKind")
    raw_sample: str = Field(default="", alias="rawSample")
    payload: Dict[str, Any] = Field(default_factory=dict)

    def unwrap(self) -> Dict[str, Any]:
        """Return the caller-facing fallback shape (e.g. ``{"challenges": [], ...}``)."""
        return dict(self.payload)


ExtractionResult = Union[ExtractionSuccess, ExtractionFailure]


__all__ = [
    "Difficulty",
    "ExtractionFailure",
    "ExtractionResult",
    "ExtractionSuccess",
    "Page",
    "PayloadKind",
    "RawPayload",
    "Section",
    "Subsection",
]
