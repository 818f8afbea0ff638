"""Append-only JSONL trace of transformation activity."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List

from pydantic import BaseModel, Field


class TransformEvent(BaseModel):
    """Structured record for a single pipeline step."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    stage: str = Field(..., description="Pipeline stage, e.g. 'segment' or 'extract_json'.")
    message: str = Field(..., description="Human-readable description of the event.")
    payload: Dict[str, Any] = Field(default_factory=dict)


class TransformTrace:
    """Collects events in memory and optionally mirrors them to a JSONL file."""

    def __init__(self, output_path: Path | None = None):
        self.output_path = output_path
        self.events: List[TransformEvent] = []
        if self.output_path is not None:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, event: TransformEvent | Dict[str, Any]) -> TransformEvent:
        """Record a single event and return the normalized object."""
        if not isinstance(event, TransformEvent):
            event = TransformEvent(**event)
        self.events.append(event)
        if self.output_path is not None:
            with self.output_path.open("a", encoding="utf-8") as handle:
                handle.write(event.model_dump_json() + "\n")
        return event

    def extend(self, events: Iterable[TransformEvent | Dict[str, Any]]) -> None:
        """Batch-record multiple events."""
        for event in events:
            self.log(event)

    def stages(self) -> List[str]:
        return [event.stage for event in self.events]


__all__ = ["TransformEvent", "TransformTrace"]
