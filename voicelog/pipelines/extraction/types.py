"""Typed containers shared across the extraction pipeline.

These dataclasses live in their own module so the other stages
(`ingestion`, `prompts`, `flow`, `orchestrator`) can import them without
creating circular dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic

from voicelog.services.prompt_builder import SchemaId
from voicelog.services.response_contract import (
    ActivityRecord,
    OnboardingProfile,
    RecordT,
)


@dataclass(frozen=True)
class SchemaDescriptor(Generic[RecordT]):
    """Binds a schema id to the record model the pipeline must produce."""

    id: SchemaId
    pipeline: str
    record_model: type[RecordT]


ACTIVITY = SchemaDescriptor(
    id="activity",
    pipeline="voice_log",
    record_model=ActivityRecord,
)
ONBOARDING = SchemaDescriptor(
    id="onboarding",
    pipeline="onboarding",
    record_model=OnboardingProfile,
)


@dataclass(frozen=True)
class AudioPayload:
    """Decoded audio ready for upload."""

    data: bytes
    audio_format: str
    content_type: str


@dataclass(frozen=True)
class ExtractionRequest:
    """Normalized payload handed to the structured extraction client."""

    schema: SchemaDescriptor
    transcript: str
    known_entities: tuple[str, ...]
    system_prompt: str


@dataclass(frozen=True)
class PipelineResult(Generic[RecordT]):
    """Full structured object plus the transcript it was extracted from."""

    parsed: RecordT
    raw_transcript: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "parsed": self.parsed.model_dump(mode="json"),
            "raw_transcript": self.raw_transcript,
        }


__all__ = [
    "ACTIVITY",
    "ONBOARDING",
    "AudioPayload",
    "ExtractionRequest",
    "PipelineResult",
    "SchemaDescriptor",
    "SchemaId",
]
