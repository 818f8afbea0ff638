"""Recover a JSON value from free-text AI responses.

Strategies run from most specific to most permissive and stop at the first
parse that succeeds:

1. ``direct``        the whole string
2. ``fenced_json``   interior of a ```json fenced block
3. ``fenced_any``    interior of any fenced block
4. ``brace_span``    first balanced ``{...}`` span
5. ``trailing_comma_repair``  drop trailing commas in the current candidate
6. ``outer_braces``  first ``{`` through last ``}`` of the original text

When everything fails an :class:`ExtractionFailure` is returned; nothing here
raises on bad content.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from ccontent.core.config import PipelineSettings
from ccontent.core.provenance import TransformTrace
from ccontent.utils.text import truncate

from .models import ExtractionFailure, ExtractionResult, ExtractionSuccess

LOGGER = logging.getLogger(__name__)

FENCED_JSON_RE = re.compile(r"```[ \t]*json[ \t]*\n?([\s\S]*?)```", re.IGNORECASE)
FENCED_ANY_RE = re.compile(r"```[\w+#.-]*[ \t]*\n?([\s\S]*?)```")
TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
EXECUTION_HINT_RE = re.compile(r"\b(?:testresults|execution|output)\b", re.IGNORECASE)

_MISSING = object()


def _loads(candidate: Optional[str]) -> Any:
    if candidate is None or not candidate.strip():
        return _MISSING
    try:
        return json.loads(candidate)
    except (ValueError, RecursionError):
        return _MISSING


def first_brace_span(text: str) -> Optional[str]:
    """Return the balanced ``{...}`` span opened by the first ``{``, honouring string escapes.

    An opening brace that never closes yields None; nested fragments of a
    truncated object are never returned.
    """
    start = text.find("{")
    if start == -1:
        return None
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def outer_brace_span(text: str) -> Optional[str]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None
    return text[start : end + 1]


def strip_trailing_commas(candidate: str) -> str:
    return TRAILING_COMMA_RE.sub(r"\1", candidate)


def _fenced(pattern: re.Pattern[str]) -> Callable[[str], Optional[str]]:
    def finder(text: str) -> Optional[str]:
        match = pattern.search(text)
        return match.group(1).strip() if match else None

    return finder


def failure_payload(text: str, message: str, sample: str) -> Dict[str, Any]:
    """Fallback shape for the call site, chosen by sniffing the response text."""
    lowered = text.lower()
    if "challenge" in lowered:
        return {"challenges": [], "error": message, "rawResponse": sample}
    if "subsection" in lowered:
        return {"subsections": [], "error": message, "rawResponse": sample}
    if EXECUTION_HINT_RE.search(text):
        return {"output": "", "errors": message, "testResults": [], "error": message, "rawResponse": sample}
    return {"error": message, "rawResponse": sample}


def _coerce_text(text: Any) -> str:
    if text is None:
        return ""
    if isinstance(text, bytes):
        return text.decode("utf-8", errors="replace")
    return text if isinstance(text, str) else str(text)


def extract_json(
    text: Any,
    settings: Optional[PipelineSettings] = None,
    trace: Optional[TransformTrace] = None,
) -> ExtractionResult:
    """Apply the strategy chain to ``text`` and return success or a typed failure."""
    settings = settings or PipelineSettings()
    raw = _coerce_text(text)
    sample = truncate(raw, settings.raw_sample_chars)
    attempted: List[str] = []

    if not raw.strip():
        return _fail(raw, "empty_input", "AI response was empty", sample, attempted, trace)

    candidate: Optional[str] = raw
    locators: List[Tuple[str, Callable[[str], Optional[str]]]] = [
        ("direct", lambda value: value),
        ("fenced_json", _fenced(FENCED_JSON_RE)),
        ("fenced_any", _fenced(FENCED_ANY_RE)),
        ("brace_span", first_brace_span),
    ]
    for name, locate in locators:
        found = locate(raw)
        if found is None:
            continue
        attempted.append(name)
        candidate = found
        value = _loads(found)
        if value is not _MISSING:
            return _succeed(value, name, trace)

    repaired = strip_trailing_commas(candidate) if candidate else None
    if repaired is not None and repaired != candidate:
        attempted.append("trailing_comma_repair")
        value = _loads(repaired)
        if value is not _MISSING:
            return _succeed(value, "trailing_comma_repair", trace)

    outer = outer_brace_span(raw)
    if outer is not None:
        attempted.append("outer_braces")
        value = _loads(outer)
        if value is not _MISSING:
            return _succeed(value, "outer_braces", trace)

    if "{" not in raw and "[" not in raw:
        return _fail(raw, "no_json_found", "No JSON object found in AI response", sample, attempted, trace)
    return _fail(raw, "invalid_json", "Failed to parse AI response", sample, attempted, trace)


def _succeed(value: Any, strategy: str, trace: Optional[TransformTrace]) -> ExtractionSuccess:
    if strategy != "direct":
        LOGGER.debug("Recovered JSON from AI response via %s", strategy)
    if trace is not None:
        trace.log({"stage": "extract_json", "message": "parsed", "payload": {"strategy": strategy}})
    return ExtractionSuccess(value=value, strategy=strategy)


def _fail(
    raw: str,
    kind: str,
    message: str,
    sample: str,
    attempted: List[str],
    trace: Optional[TransformTrace],
) -> ExtractionFailure:
    LOGGER.warning("JSON extraction failed (%s) after %s: %r", kind, attempted or ["nothing"], sample)
    if trace is not None:
        trace.log(
            {
                "stage": "extract_json",
                "message": "failed",
                "payload": {"error_kind": kind, "attempted": attempted},
            }
        )
    return ExtractionFailure(
        error_kind=kind,
        raw_sample=sample,
        payload=failure_payload(raw, message, sample),
    )


__all__ = [
    "extract_json",
    "failure_payload",
    "first_brace_span",
    "outer_brace_span",
    "strip_trailing_commas",
]
