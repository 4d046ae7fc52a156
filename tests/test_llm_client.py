"""Tests for the JSON-mode structured extraction client."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from conftest import TEST_API_KEY, FakeOpenAI
from voicelog.services.errors import (
    ConfigurationError,
    MalformedUpstreamResponse,
    UpstreamUnavailable,
)
from voicelog.services.llm_client import StructuredExtractionClient
from voicelog.services.response_contract import ActivityRecord, OnboardingProfile

BASE_URL = "https://api.openai.test/v1"

ACTIVITY_JSON = {
    "activity_type": "meeting",
    "client_name": "Globex",
    "duration_minutes": 60,
    "revenue": None,
    "summary": "Strategy meeting with Globex.",
    "notes": None,
    "confidence": 0.85,
}


def _client(transport: httpx.AsyncBaseTransport) -> StructuredExtractionClient:
    return StructuredExtractionClient(
        api_key=TEST_API_KEY,
        base_url=BASE_URL,
        transport=transport,
    )


def _extract(client: StructuredExtractionClient, model=ActivityRecord):
    return asyncio.run(
        client.extract(
            system_prompt="Extract the activity.",
            transcript="Had a one hour strategy meeting with Globex.",
            record_model=model,
        )
    )


def test_extract_returns_validated_record():
    fake = FakeOpenAI(completion=ACTIVITY_JSON)

    record = _extract(_client(fake.transport))

    assert isinstance(record, ActivityRecord)
    assert record.activity_type == "meeting"
    assert record.client_name == "Globex"
    assert record.duration_minutes == 60


def test_request_uses_json_mode_with_system_and_user_messages():
    fake = FakeOpenAI(completion=ACTIVITY_JSON)

    _extract(_client(fake.transport))

    assert fake.paths == ["/v1/chat/completions"]
    assert fake.requests[0].headers["authorization"] == f"Bearer {TEST_API_KEY}"
    payload = fake.completion_payloads()[0]
    assert payload["model"] == "gpt-4o-mini"
    assert payload["response_format"] == {"type": "json_object"}
    assert payload["temperature"] == 0.3
    assert [message["role"] for message in payload["messages"]] == ["system", "user"]
    assert payload["messages"][0]["content"] == "Extract the activity."
    assert payload["messages"][1]["content"] == "Had a one hour strategy meeting with Globex."


def test_upstream_error_status_is_preserved():
    fake = FakeOpenAI(completion=ACTIVITY_JSON, completion_status=429)

    with pytest.raises(UpstreamUnavailable) as excinfo:
        _extract(_client(fake.transport))

    assert excinfo.value.upstream_status == 429
    assert excinfo.value.http_status == 429
    assert excinfo.value.message == "OpenAI API error: 429"
    assert "Upstream failure" in excinfo.value.body


def test_timeout_maps_to_upstream_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamUnavailable) as excinfo:
        _extract(_client(httpx.MockTransport(handler)))

    assert excinfo.value.upstream_status is None
    assert excinfo.value.http_status == 500


def test_non_json_content_is_malformed():
    fake = FakeOpenAI(completion="Sure! Here is the activity you asked for.")

    with pytest.raises(MalformedUpstreamResponse) as excinfo:
        _extract(_client(fake.transport))

    assert "invalid JSON" in excinfo.value.message


def test_out_of_enum_value_is_malformed():
    fake = FakeOpenAI(completion={**ACTIVITY_JSON, "activity_type": "lunch"})

    with pytest.raises(MalformedUpstreamResponse) as excinfo:
        _extract(_client(fake.transport))

    assert "activity_type" in excinfo.value.message


def test_missing_choices_is_malformed():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"choices": []}))

    with pytest.raises(MalformedUpstreamResponse):
        _extract(_client(transport))


def test_non_json_envelope_is_malformed():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(MalformedUpstreamResponse):
        _extract(_client(transport))


def test_onboarding_model_is_supported():
    fake = FakeOpenAI(
        completion={
            "clients": [{"name": "Acme", "type": "retainer", "monthly_value": "5000"}],
            "business_type": "advisor",
            "main_challenges": ["a", "b", "c", "d"],
        }
    )

    profile = _extract(_client(fake.transport), model=OnboardingProfile)

    assert profile.business_type == "advisor"
    assert profile.clients[0].monthly_value == 5000
    assert profile.main_challenges == ["a", "b", "c"]


@pytest.mark.parametrize("api_key", [None, "", "   "])
def test_missing_api_key_fails_before_any_request(api_key):
    with pytest.raises(ConfigurationError) as excinfo:
        StructuredExtractionClient(api_key=api_key)

    assert excinfo.value.message == "OpenAI API key not configured"


def test_slow_upstream_is_cut_off_at_the_call_deadline():
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, json={})

    client = StructuredExtractionClient(
        api_key=TEST_API_KEY,
        base_url=BASE_URL,
        timeout_seconds=0.05,
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(UpstreamUnavailable) as excinfo:
        _extract(client)

    assert excinfo.value.message == "OpenAI API timed out during completion"
    assert excinfo.value.upstream_status is None
