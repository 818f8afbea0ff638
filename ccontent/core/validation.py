"""Invariant checks for normalized content, so bad records never reach the UI silently."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Optional, Sequence

from .config import PipelineSettings

if TYPE_CHECKING:  # pragma: no cover
    from ccontent.content.models import Page, Subsection


class ValidationFailure(ValueError):
    """Raised by strict validators when content breaks a structural invariant."""

    def __init__(self, errors: Sequence[str]):
        self.errors = list(errors)
        super().__init__(f"Validation failed: {'; '.join(self.errors)}")


@dataclass
class ValidationResult:
    """Result of a validation check."""

    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    data: Any = None

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def raise_if_invalid(self) -> None:
        """Raise ValidationFailure if validation failed."""
        if not self.valid:
            raise ValidationFailure(self.errors)


def find_duplicate_ids(ids: Sequence[str]) -> List[str]:
    """Return ids that occur more than once, in first-seen order."""
    counts = Counter(ids)
    seen: List[str] = []
    for item in ids:
        if counts[item] > 1 and item not in seen:
            seen.append(item)
    return seen


class ContentValidator:
    """Checks the Subsection/Page invariants of a normalized module."""

    def __init__(self, *, strict: bool = False, settings: Optional[PipelineSettings] = None):
        """Initialize the validator.

        Args:
            strict: If True, raise ValidationFailure on the first invalid result
            settings: Supplies the key-point cap (defaults to PipelineSettings())
        """
        self.strict = strict
        self.settings = settings or PipelineSettings()
        self.logger = logging.getLogger(__name__)

    def validate_pages(self, pages: Sequence["Page"], *, label: str = "subsection") -> ValidationResult:
        errors: List[str] = []
        warnings: List[str] = []

        if not pages:
            errors.append(f"{label}: expected at least one page")
        for position, page in enumerate(pages, start=1):
            if page.page_number != position:
                errors.append(f"{label}: page {position} has page_number {page.page_number}")
            if not page.content.strip():
                warnings.append(f"{label}: page {position} has empty content")
            if not page.key_takeaway.strip():
                warnings.append(f"{label}: page {position} has no key takeaway")

        return self._finish(ValidationResult(valid=not errors, errors=errors, warnings=warnings, data=pages))

    def validate_subsections(self, subsections: Sequence["Subsection"]) -> ValidationResult:
        """Validate a module's subsection list (page invariants plus unique ids)."""
        errors: List[str] = []
        warnings: List[str] = []

        duplicates = find_duplicate_ids([subsection.id for subsection in subsections])
        if duplicates:
            errors.append(f"Duplicate subsection ids: {duplicates}")

        for subsection in subsections:
            if not subsection.id.strip():
                errors.append("Subsection with blank id")
            if not subsection.title.strip():
                warnings.append(f"{subsection.id}: blank title")
            limit = self.settings.max_key_points
            if len(subsection.key_points) > limit:
                warnings.append(f"{subsection.id}: {len(subsection.key_points)} key points (more than {limit})")
            page_result = ContentValidator(strict=False).validate_pages(subsection.pages, label=subsection.id)
            errors.extend(page_result.errors)
            warnings.extend(page_result.warnings)

        return self._finish(ValidationResult(valid=not errors, errors=errors, warnings=warnings, data=subsections))

    def _finish(self, result: ValidationResult) -> ValidationResult:
        if not result.valid:
            self.logger.error("Content validation failed: %s", result.errors)
        elif result.has_warnings:
            self.logger.debug("Content validation warnings: %s", result.warnings)

        if self.strict:
            result.raise_if_invalid()
        return result


__all__ = [
    "ContentValidator",
    "ValidationFailure",
    "ValidationResult",
    "find_duplicate_ids",
]
