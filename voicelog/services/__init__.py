"""Service layer helpers for external integrations."""

from .errors import (
    ConfigurationError,
    DecodingError,
    InputError,
    MalformedUpstreamResponse,
    PipelineError,
    UpstreamUnavailable,
)
from .llm_client import StructuredExtractionClient
from .transcribe import TranscribeService, TranscriptionResult

__all__ = [
    "PipelineError",
    "InputError",
    "DecodingError",
    "ConfigurationError",
    "UpstreamUnavailable",
    "MalformedUpstreamResponse",
    "StructuredExtractionClient",
    "TranscribeService",
    "TranscriptionResult",
]
