"""Request ingestion helpers (audio decoding stage of the pipeline)."""

from __future__ import annotations

import base64
import binascii
import re
from typing import Final

from voicelog.services.errors import DecodingError, InputError

from .types import AudioPayload

DEFAULT_AUDIO_FORMAT: Final[str] = "webm"

_CONTENT_TYPES: Final[dict[str, str]] = {
    "webm": "audio/webm",
    "wav": "audio/wav",
    "mp3": "audio/mpeg",
    "mpeg": "audio/mpeg",
    "mpga": "audio/mpeg",
    "mp4": "audio/mp4",
    "m4a": "audio/mp4",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
}

_DATA_URL_PREFIX = re.compile(r"^data:[\w.+/-]*(;[\w=.+-]+)*;base64,", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")

SUPPORTED_AUDIO_FORMATS: Final[tuple[str, ...]] = tuple(_CONTENT_TYPES)


def resolve_audio_format(audio_format: str | None) -> tuple[str, str]:
    """Return ``(format, content_type)``, defaulting to webm recordings."""

    normalized = (audio_format or "").strip().lower().lstrip(".")
    if normalized.startswith("audio/"):
        normalized = normalized.split("/", 1)[1].split(";", 1)[0]
    normalized = normalized or DEFAULT_AUDIO_FORMAT

    content_type = _CONTENT_TYPES.get(normalized)
    if content_type is None:
        raise InputError(
            f"Unsupported audio format: {normalized}. "
            f"Supported formats: {', '.join(SUPPORTED_AUDIO_FORMATS)}"
        )
    return normalized, content_type


def decode_audio_base64(payload: str | None) -> bytes:
    """Decode a base64 (or base64 data URL) payload, rejecting empty input first."""

    if payload is None or not payload.strip():
        raise InputError("No audio data provided")

    cleaned = _DATA_URL_PREFIX.sub("", payload.strip())
    cleaned = _WHITESPACE.sub("", cleaned)
    # Restore trailing padding the client dropped.
    if len(cleaned) % 4 in (2, 3):
        cleaned += "=" * (4 - len(cleaned) % 4)

    try:
        audio_bytes = base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodingError("Audio payload is not valid base64") from exc

    if not audio_bytes:
        raise DecodingError("Audio payload decoded to zero bytes")
    return audio_bytes


def read_audio_payload(payload: str | None, audio_format: str | None) -> AudioPayload:
    """Validate the format tag and decode the audio into an upload-ready payload."""

    resolved_format, content_type = resolve_audio_format(audio_format)
    return AudioPayload(
        data=decode_audio_base64(payload),
        audio_format=resolved_format,
        content_type=content_type,
    )


__all__ = [
    "DEFAULT_AUDIO_FORMAT",
    "SUPPORTED_AUDIO_FORMATS",
    "decode_audio_base64",
    "read_audio_payload",
    "resolve_audio_format",
]
