"""Pydantic schemas used as views in the MVC architecture."""

from .common import ErrorResponse
from .diagnostics import (
    CredentialDiagnosticsResponse,
    GoogleCredentialReport,
    GoogleCredentialStructure,
    OpenAICredentialReport,
    PipelineMapResponse,
    PipelineStageView,
)
from .parse import (
    ActivityParseResponse,
    KnownClient,
    OnboardingParseResponse,
    OnboardingRequest,
    TranscribeRequest,
    TranscribeResponse,
    VoiceLogRequest,
)

__all__ = [
    "ActivityParseResponse",
    "CredentialDiagnosticsResponse",
    "ErrorResponse",
    "GoogleCredentialReport",
    "GoogleCredentialStructure",
    "KnownClient",
    "OnboardingParseResponse",
    "OnboardingRequest",
    "OpenAICredentialReport",
    "PipelineMapResponse",
    "PipelineStageView",
    "TranscribeRequest",
    "TranscribeResponse",
    "VoiceLogRequest",
]
