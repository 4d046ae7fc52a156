"""OpenAI Whisper transcription integration."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx
from pydantic import SecretStr

from voicelog.config.settings import OpenAIConfig
from voicelog.services.errors import MalformedUpstreamResponse
from voicelog.services.openai_api import (
    create_http_client,
    post_within,
    raise_for_upstream_status,
    require_api_key,
    upstream_call,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranscriptionResult:
    """Structured transcription outcome returned to the pipeline."""

    transcript: str
    language_code: str | None = None


class TranscribeService:
    """High-level facade for sending recorded audio to the Whisper endpoint."""

    def __init__(
        self,
        *,
        api_key: SecretStr | str | None,
        model: str = "whisper-1",
        language_code: str = "en",
        base_url: str = "https://api.openai.com/v1",
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = require_api_key(api_key)
        self._model = model
        self._language_code = language_code
        self._base_url = base_url
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        config: OpenAIConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "TranscribeService":
        return cls(
            api_key=config.api_key,
            model=config.transcription_model,
            language_code=config.transcription_language,
            base_url=config.base_url,
            timeout_seconds=config.timeout_seconds,
            transport=transport,
        )

    async def transcribe(
        self,
        audio_bytes: bytes,
        *,
        audio_format: str,
        content_type: str,
    ) -> TranscriptionResult:
        """Upload the audio as multipart form data and return the recognized text."""

        files = {"file": (f"audio.{audio_format}", audio_bytes, content_type)}
        data = {"model": self._model, "language": self._language_code}

        logger.info(
            "Sending %s bytes to Whisper model=%s format=%s",
            len(audio_bytes),
            self._model,
            audio_format,
        )

        async with create_http_client(
            base_url=self._base_url,
            api_key=self._api_key,
            timeout_seconds=self._timeout_seconds,
            transport=self._transport,
        ) as client:
            async with upstream_call("transcription"):
                response = await post_within(
                    client,
                    "/audio/transcriptions",
                    timeout_seconds=self._timeout_seconds,
                    files=files,
                    data=data,
                )

        raise_for_upstream_status(response, "transcription")

        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedUpstreamResponse(
                "OpenAI transcription response is not JSON"
            ) from exc

        text = payload.get("text") if isinstance(payload, dict) else None
        if not isinstance(text, str):
            raise MalformedUpstreamResponse(
                "OpenAI transcription response has no text field"
            )

        logger.info("Transcription successful, text length: %s", len(text))
        return TranscriptionResult(
            transcript=text.strip(),
            language_code=self._language_code,
        )


__all__ = ["TranscribeService", "TranscriptionResult"]
