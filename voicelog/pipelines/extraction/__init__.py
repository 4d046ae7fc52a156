"""Structured extraction pipeline package.

Modules are organised by the order in which a request executes:

1. `ingestion` – validate the format tag and decode base64 audio.
2. `prompts` – render the schema-specific system prompt.
3. `orchestrator` – drive transcription and extraction, tag failures.
4. `flow` – state machine and human-readable stage map.

The FastAPI controllers import from here so contributors can jump straight
to the relevant stage.
"""

from .flow import ExtractionPipeline, PipelineRun, PipelineStage, PipelineState
from .ingestion import (
    SUPPORTED_AUDIO_FORMATS,
    decode_audio_base64,
    read_audio_payload,
    resolve_audio_format,
)
from .orchestrator import PipelineOrchestrator
from .prompts import build_extraction_request
from .types import (
    ACTIVITY,
    ONBOARDING,
    AudioPayload,
    ExtractionRequest,
    PipelineResult,
    SchemaDescriptor,
)

__all__ = [
    "ACTIVITY",
    "ONBOARDING",
    "AudioPayload",
    "ExtractionPipeline",
    "ExtractionRequest",
    "PipelineOrchestrator",
    "PipelineResult",
    "PipelineRun",
    "PipelineStage",
    "PipelineState",
    "SUPPORTED_AUDIO_FORMATS",
    "SchemaDescriptor",
    "build_extraction_request",
    "decode_audio_base64",
    "read_audio_payload",
    "resolve_audio_format",
]
