"""Thin OpenAI chat-completions client for JSON-mode structured extraction."""

from __future__ import annotations

import logging
from typing import Any

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
from voicelog.services.response_contract import RecordT, parse_contract

logger = logging.getLogger(__name__)


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


def _message_content(envelope: Any) -> str:
    """Pull ``choices[0].message.content`` out of a completion envelope."""

    try:
        content = envelope["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise MalformedUpstreamResponse(
            "OpenAI completion response has no message content"
        ) from exc
    if not isinstance(content, str) or not content.strip():
        raise MalformedUpstreamResponse("OpenAI completion returned empty content")
    return content


class StructuredExtractionClient:
    """Request JSON-mode completions and validate them against a record model."""

    def __init__(
        self,
        *,
        api_key: SecretStr | str | None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.3,
        base_url: str = "https://api.openai.com/v1",
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = require_api_key(api_key)
        self._model = model
        self._temperature = temperature
        self._base_url = base_url
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        config: OpenAIConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "StructuredExtractionClient":
        return cls(
            api_key=config.api_key,
            model=config.chat_model,
            temperature=config.temperature,
            base_url=config.base_url,
            timeout_seconds=config.timeout_seconds,
            transport=transport,
        )

    async def complete_json(self, *, system_prompt: str, user_prompt: str) -> str:
        """Run one JSON-mode chat completion and return the raw message content."""

        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "response_format": {"type": "json_object"},
            "temperature": self._temperature,
        }

        async with create_http_client(
            base_url=self._base_url,
            api_key=self._api_key,
            timeout_seconds=self._timeout_seconds,
            transport=self._transport,
        ) as client:
            async with upstream_call("completion"):
                response = await post_within(
                    client,
                    "/chat/completions",
                    timeout_seconds=self._timeout_seconds,
                    json=payload,
                )

        raise_for_upstream_status(response, "completion")

        try:
            envelope = response.json()
        except ValueError as exc:
            raise MalformedUpstreamResponse(
                "OpenAI completion response is not JSON"
            ) from exc
        return _message_content(envelope)

    async def extract(
        self,
        *,
        system_prompt: str,
        transcript: str,
        record_model: type[RecordT],
    ) -> RecordT:
        """Return ``record_model`` parsed from the completion, or raise.

        No partial structure is ever returned: content that is not JSON, or
        JSON that breaks the record contract, raises
        ``MalformedUpstreamResponse``.
        """

        raw_content = await self.complete_json(
            system_prompt=system_prompt,
            user_prompt=transcript,
        )
        logger.debug(
            "Raw LLM output model=%s: %s",
            record_model.__name__,
            _truncate(raw_content),
        )

        outcome = parse_contract(record_model, raw_content)
        if not outcome.ok:
            logger.warning(
                "LLM output rejected model=%s: %s",
                record_model.__name__,
                outcome.error,
            )
            raise MalformedUpstreamResponse(outcome.error or "LLM output rejected")
        return outcome.record


__all__ = ["StructuredExtractionClient"]
