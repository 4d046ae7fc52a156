"""Shared fixtures: settings with fake credentials and a fake OpenAI upstream."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from voicelog.config.settings import GoogleConfig, OpenAIConfig, Settings

TEST_API_KEY = "sk-test-key"


def make_settings(
    tmp_path,
    *,
    api_key: str | None = TEST_API_KEY,
    google_credentials: str | None = None,
) -> Settings:
    """Build settings that never touch real credentials or the repo log folder."""

    return Settings(
        log_file=str(tmp_path / "app.log"),
        pipeline_log_file=str(tmp_path / "pipeline.log"),
        openai=OpenAIConfig(api_key=api_key, base_url="https://api.openai.test/v1"),
        google=GoogleConfig(GOOGLE_OAUTH_CREDENTIALS=google_credentials),
    )


def completion_envelope(content: Any) -> dict[str, Any]:
    """Wrap message content the way the chat-completions endpoint does."""

    if not isinstance(content, str):
        content = json.dumps(content)
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


class FakeOpenAI:
    """Routes transcription and completion calls to canned responses."""

    def __init__(
        self,
        *,
        transcript: str = "Test transcript",
        completion: Any = None,
        transcription_status: int = 200,
        completion_status: int = 200,
    ) -> None:
        self.transcript = transcript
        self.completion = completion
        self.transcription_status = transcription_status
        self.completion_status = completion_status
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/audio/transcriptions"):
            if self.transcription_status != 200:
                return httpx.Response(
                    self.transcription_status,
                    json={"error": {"message": "Rate limit reached"}},
                )
            return httpx.Response(200, json={"text": self.transcript})
        if path.endswith("/chat/completions"):
            if self.completion_status != 200:
                return httpx.Response(
                    self.completion_status,
                    json={"error": {"message": "Upstream failure"}},
                )
            return httpx.Response(200, json=completion_envelope(self.completion))
        return httpx.Response(404, json={"error": "unknown path"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def completion_payloads(self) -> list[dict[str, Any]]:
        return [
            json.loads(request.content)
            for request in self.requests
            if request.url.path.endswith("/chat/completions")
        ]


@pytest.fixture
def settings_factory(tmp_path):
    def factory(**kwargs: Any) -> Settings:
        return make_settings(tmp_path, **kwargs)

    return factory
