"""
Foundational configuration, policy and logging utilities for the content pipeline.

The pipeline stages in ``ccontent.content`` depend on these modules, never the
other way around.
"""

from .config import PipelineSettings, TimeEstimateConfig, load_pipeline_settings, merge_settings
from .policies import ContentPolicies
from .provenance import TransformEvent, TransformTrace
from .validation import ContentValidator, ValidationFailure, ValidationResult

__all__ = [
    "ContentPolicies",
    "ContentValidator",
    "PipelineSettings",
    "TimeEstimateConfig",
    "TransformEvent",
    "TransformTrace",
    "ValidationFailure",
    "ValidationResult",
    "load_pipeline_settings",
    "merge_settings",
]
