"""Dispatch a tagged RawPayload to the extractor for its kind."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from ccontent.core.config import PipelineSettings
from ccontent.core.policies import ContentPolicies
from ccontent.core.provenance import TransformTrace

from .json_extract import extract_json
from .models import ExtractionResult, PayloadKind, RawPayload, Subsection
from .normalizer import parse_module_markdown, parse_subsection_markdown

LOGGER = logging.getLogger(__name__)

TransformResult = Union[List[Subsection], Subsection, ExtractionResult]


@dataclass(frozen=True)
class TransformOutcome:
    kind: PayloadKind
    result: TransformResult

    @property
    def subsections(self) -> List[Subsection]:
        """Subsections produced by a markdown payload (empty for AI responses)."""
        if isinstance(self.result, list):
            return self.result
        if isinstance(self.result, Subsection):
            return [self.result]
        return []


def make_payload(text: Any, kind: PayloadKind | str) -> RawPayload:
    """Build a RawPayload, rejecting unknown kinds."""
    try:
        kind = PayloadKind(kind)
    except ValueError as exc:
        valid = ", ".join(PayloadKind.choices())
        raise ValueError(f"Unknown payload kind '{kind}'. Valid options: {valid}") from exc
    if text is not None and not isinstance(text, str):
        raise TypeError(f"Payload text must be a string, got {type(text).__name__}")
    return RawPayload(text=text, kind=kind)


def transform_payload(
    payload: RawPayload,
    *,
    module_id: str = "module",
    title: Optional[str] = None,
    subsection_id: Optional[str] = None,
    settings: Optional[PipelineSettings] = None,
    policies: Optional[ContentPolicies] = None,
    trace: Optional[TransformTrace] = None,
) -> TransformOutcome:
    """Route ``payload`` by kind and return the structured result.

    ``title`` names the subsection for subsection-markdown payloads; it is
    ignored for the other kinds.
    """
    settings = settings or (policies.settings if policies is not None else PipelineSettings())
    policies = policies or ContentPolicies(settings)

    if payload.kind is PayloadKind.MODULE_MARKDOWN:
        result: TransformResult = parse_module_markdown(payload.text, module_id, settings, policies)
        detail = {"subsections": len(result)}
    elif payload.kind is PayloadKind.SUBSECTION_MARKDOWN:
        result = parse_subsection_markdown(
            payload.text,
            title or "Untitled Subsection",
            subsection_id=subsection_id,
            module_id=module_id,
            settings=settings,
            policies=policies,
        )
        detail = {"id": result.id, "pages": len(result.pages)}
    else:
        result = extract_json(payload.text, settings, trace)
        detail = {"ok": result.ok}

    LOGGER.debug("Transformed %s payload for module %s: %s", payload.kind.value, module_id, detail)
    if trace is not None:
        trace.log(
            {
                "stage": "transform",
                "message": payload.kind.value,
                "payload": {"module_id": module_id, **detail},
            }
        )
    return TransformOutcome(kind=payload.kind, result=result)


__all__ = ["TransformOutcome", "make_payload", "transform_payload"]
