"""
Typed settings for the content transformation pipeline.

Every constant the segmenter, paginator and extractors rely on lives here so a
deployment can tune page sizes or heuristics from YAML without code changes.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

CONFIG_ENV_VAR = "CCONTENT_CONFIG"


class TimeEstimateConfig(BaseModel):
    """Parameters of the length-proportional reading time heuristic."""

    model_config = ConfigDict(extra="forbid")

    chars_per_unit: int = Field(default=250, ge=1)
    minutes_per_unit: int = Field(default=3, ge=1)
    min_minutes: int = Field(default=5, ge=0)


class PipelineSettings(BaseModel):
    """Top-level settings shared by every pipeline stage."""

    model_config = ConfigDict(extra="ignore")

    heading_marker: str = Field(default="####", description="Markdown token delimiting subsections/pages.")
    paragraphs_per_page: int = Field(default=2, ge=1, le=10)
    max_key_points: int = Field(default=5, ge=1)
    fallback_sentence_count: int = Field(default=3, ge=1)
    min_sentence_length: int = Field(default=20, ge=0)
    synthetic_page_limit: int = Field(default=3, ge=1)
    raw_sample_chars: int = Field(default=200, ge=0)
    time_estimate: TimeEstimateConfig = Field(default_factory=TimeEstimateConfig)
    default_difficulty: Literal["beginner", "intermediate", "advanced"] = "intermediate"
    duplicate_ids: Literal["suffix", "reject"] = "suffix"

    @field_validator("heading_marker", mode="before")
    @classmethod
    def strip_marker(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise ValueError("heading_marker must not be blank")
        return value

    @field_validator("default_difficulty", "duplicate_ids", mode="before")
    @classmethod
    def lower_choice(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @model_validator(mode="before")
    @classmethod
    def coerce_legacy_format(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        payload = dict(data)
        # Older configs nested everything under a "pipeline" block.
        nested = payload.pop("pipeline", None)
        if isinstance(nested, dict):
            payload = {**nested, **payload}
        # Flat time-estimate keys.
        flat_time = {
            key: payload.pop(key)
            for key in ("chars_per_unit", "minutes_per_unit", "min_minutes")
            if key in payload
        }
        if flat_time:
            time_block = dict(payload.get("time_estimate") or {})
            time_block.update(flat_time)
            payload["time_estimate"] = time_block
        return payload


def read_yaml_file(path: Path) -> Dict[str, Any]:
    """Load a YAML file and return a dictionary."""
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at root of {path}, received {type(data)}")
    return data


def load_pipeline_settings(path: Path) -> PipelineSettings:
    """Parse the pipeline settings YAML into a typed model."""
    path = Path(path).expanduser().resolve()
    data = read_yaml_file(path)
    try:
        return PipelineSettings.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid pipeline settings in {path}") from exc


def resolve_settings(path: Optional[Path] = None) -> PipelineSettings:
    """Load settings from ``path``, the ``CCONTENT_CONFIG`` env var, or defaults."""
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if not env_path:
            return PipelineSettings()
        path = Path(env_path)
    return load_pipeline_settings(path)


def merge_settings(base: PipelineSettings, overrides: Dict[str, Any]) -> PipelineSettings:
    """
    Return a new PipelineSettings object by applying overrides on top of the base.

    Nested ``time_estimate`` overrides are merged key by key.
    """
    payload = base.model_dump()
    overrides = dict(overrides)
    time_overrides = overrides.pop("time_estimate", None)
    payload.update(overrides)
    if isinstance(time_overrides, dict):
        payload["time_estimate"] = {**payload["time_estimate"], **time_overrides}
    try:
        return PipelineSettings.model_validate(payload)
    except ValidationError as exc:
        raise ValueError("Invalid overrides for PipelineSettings") from exc


__all__ = [
    "CONFIG_ENV_VAR",
    "PipelineSettings",
    "TimeEstimateConfig",
    "load_pipeline_settings",
    "merge_settings",
    "read_yaml_file",
    "resolve_settings",
]
