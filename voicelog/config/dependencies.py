"""Pipeline construction from injected settings."""

from __future__ import annotations

import httpx

from voicelog.pipelines.extraction import PipelineOrchestrator
from voicelog.services import StructuredExtractionClient, TranscribeService

from .settings import Settings


def build_orchestrator(
    config: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PipelineOrchestrator:
    """Build both OpenAI clients once; raises ``ConfigurationError`` without a key."""

    return PipelineOrchestrator(
        transcriber=TranscribeService.from_config(config.openai, transport=transport),
        extractor=StructuredExtractionClient.from_config(config.openai, transport=transport),
    )
