"""Orchestrator behaviour with in-memory transcriber and extractor doubles."""

from __future__ import annotations

import asyncio
import base64

import pytest

from voicelog.pipelines.extraction import ACTIVITY, ONBOARDING, PipelineOrchestrator
from voicelog.services.errors import (
    DecodingError,
    InputError,
    MalformedUpstreamResponse,
    UpstreamUnavailable,
)
from voicelog.services.response_contract import ActivityRecord, OnboardingProfile, validate_contract
from voicelog.services.transcribe import TranscriptionResult

AUDIO = base64.b64encode(b"RIFF....WAVEfmt fake audio").decode("ascii")

ACTIVITY_JSON = {
    "activity_type": "call",
    "client_name": "Acme Corp",
    "duration_minutes": 30,
    "revenue": 500,
    "summary": "Call with Acme Corp.",
    "confidence": 0.9,
}


class FakeTranscriber:
    def __init__(self, transcript: str = "Had a call with Acme", error: Exception | None = None):
        self.transcript = transcript
        self.error = error
        self.calls: list[dict] = []

    async def transcribe(self, audio_bytes, *, audio_format, content_type):
        self.calls.append(
            {"bytes": audio_bytes, "audio_format": audio_format, "content_type": content_type}
        )
        if self.error is not None:
            raise self.error
        return TranscriptionResult(transcript=self.transcript, language_code="en")


class FakeExtractor:
    def __init__(self, payload: dict | None = None, error: Exception | None = None):
        self.payload = payload if payload is not None else ACTIVITY_JSON
        self.error = error
        self.calls: list[dict] = []

    async def extract(self, *, system_prompt, transcript, record_model):
        self.calls.append(
            {"system_prompt": system_prompt, "transcript": transcript, "record_model": record_model}
        )
        if self.error is not None:
            raise self.error
        outcome = validate_contract(record_model, self.payload)
        if not outcome.ok:
            raise MalformedUpstreamResponse(outcome.error)
        return outcome.record


@pytest.fixture
def transcriber() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def orchestrator(transcriber, extractor) -> PipelineOrchestrator:
    return PipelineOrchestrator(transcriber=transcriber, extractor=extractor)


def test_text_input_skips_transcription(orchestrator, transcriber, extractor):
    result = asyncio.run(orchestrator.parse_voice_log(transcript="  Had a call with Acme Corp  "))

    assert isinstance(result.parsed, ActivityRecord)
    assert result.raw_transcript == "Had a call with Acme Corp"
    assert transcriber.calls == []
    assert len(extractor.calls) == 1
    assert extractor.calls[0]["transcript"] == "Had a call with Acme Corp"
    assert extractor.calls[0]["record_model"] is ActivityRecord


def test_known_entities_reach_the_prompt(orchestrator, extractor):
    asyncio.run(
        orchestrator.parse_voice_log(
            transcript="Met with Globex",
            known_entities=[" Globex ", "", "Acme Corp", "Globex"],
        )
    )

    assert "Known clients: Globex, Acme Corp\n" in extractor.calls[0]["system_prompt"]


def test_audio_takes_precedence_over_transcript(orchestrator, transcriber, extractor):
    result = asyncio.run(
        orchestrator.parse_voice_log(
            transcript="typed text that should be ignored",
            audio=AUDIO,
            audio_format="wav",
        )
    )

    assert result.raw_transcript == "Had a call with Acme"
    assert transcriber.calls[0]["audio_format"] == "wav"
    assert transcriber.calls[0]["content_type"] == "audio/wav"
    assert transcriber.calls[0]["bytes"] == base64.b64decode(AUDIO)
    assert extractor.calls[0]["transcript"] == "Had a call with Acme"


def test_audio_format_defaults_to_webm(orchestrator, transcriber):
    asyncio.run(orchestrator.parse_voice_log(audio=AUDIO))

    assert transcriber.calls[0]["audio_format"] == "webm"


@pytest.mark.parametrize("transcript", [None, "", "   "])
def test_missing_input_is_rejected_without_upstream_calls(orchestrator, transcriber, extractor, transcript):
    for _ in range(2):
        with pytest.raises(InputError) as excinfo:
            asyncio.run(orchestrator.parse_voice_log(transcript=transcript, audio="  "))
        assert excinfo.value.message == "No transcript or audio provided"
        assert excinfo.value.stage == "idle"

    assert transcriber.calls == []
    assert extractor.calls == []


def test_onboarding_requires_transcript(orchestrator, extractor):
    with pytest.raises(InputError) as excinfo:
        asyncio.run(orchestrator.parse_onboarding(transcript=""))

    assert excinfo.value.message == "No transcript provided"
    assert extractor.calls == []


def test_onboarding_uses_onboarding_schema(transcriber):
    extractor = FakeExtractor(
        payload={
            "clients": [{"name": "Acme", "type": "retainer"}, {"name": "Globex"}],
            "business_type": "consultant",
            "main_challenges": [],
        }
    )
    orchestrator = PipelineOrchestrator(transcriber=transcriber, extractor=extractor)

    result = asyncio.run(
        orchestrator.parse_onboarding(transcript="I'm a consultant with clients Acme and Globex")
    )

    assert isinstance(result.parsed, OnboardingProfile)
    assert [client.name for client in result.parsed.clients] == ["Acme", "Globex"]
    assert result.parsed.revenue_target is None
    assert extractor.calls[0]["record_model"] is OnboardingProfile
    assert "business_type" in extractor.calls[0]["system_prompt"]


def test_invalid_base64_fails_in_decoding(orchestrator, transcriber, extractor):
    with pytest.raises(DecodingError) as excinfo:
        asyncio.run(orchestrator.parse_voice_log(audio="!!!not-base64!!!"))

    assert excinfo.value.stage == "decoding"
    assert excinfo.value.http_status == 400
    assert transcriber.calls == []
    assert extractor.calls == []


def test_unsupported_format_fails_before_transcription(orchestrator, transcriber):
    with pytest.raises(InputError) as excinfo:
        asyncio.run(orchestrator.parse_voice_log(audio=AUDIO, audio_format="aiff"))

    assert "Unsupported audio format" in excinfo.value.message
    assert transcriber.calls == []


def test_transcription_failure_is_tagged_and_skips_extraction(extractor):
    transcriber = FakeTranscriber(
        error=UpstreamUnavailable("OpenAI API error: 429", provider="openai", upstream_status=429)
    )
    orchestrator = PipelineOrchestrator(transcriber=transcriber, extractor=extractor)

    with pytest.raises(UpstreamUnavailable) as excinfo:
        asyncio.run(orchestrator.parse_voice_log(audio=AUDIO))

    assert excinfo.value.stage == "transcribing"
    assert excinfo.value.http_status == 429
    assert extractor.calls == []


def test_empty_transcription_is_an_input_error(extractor):
    orchestrator = PipelineOrchestrator(transcriber=FakeTranscriber(transcript=""), extractor=extractor)

    with pytest.raises(InputError) as excinfo:
        asyncio.run(orchestrator.parse_voice_log(audio=AUDIO))

    assert excinfo.value.message == "No speech recognized in audio"
    assert extractor.calls == []


def test_malformed_extraction_is_tagged_with_extracting_stage(transcriber):
    extractor = FakeExtractor(payload={**ACTIVITY_JSON, "activity_type": "lunch"})
    orchestrator = PipelineOrchestrator(transcriber=transcriber, extractor=extractor)

    with pytest.raises(MalformedUpstreamResponse) as excinfo:
        asyncio.run(orchestrator.parse_voice_log(transcript="Lunch with Acme"))

    assert excinfo.value.stage == "extracting"
    assert excinfo.value.http_status == 500


def test_transcribe_only_returns_text(orchestrator, transcriber, extractor):
    result = asyncio.run(orchestrator.transcribe(audio=AUDIO, audio_format="mp3"))

    assert result.transcript == "Had a call with Acme"
    assert transcriber.calls[0]["content_type"] == "audio/mpeg"
    assert extractor.calls == []


def test_transcribe_only_requires_audio(orchestrator, transcriber):
    with pytest.raises(InputError) as excinfo:
        asyncio.run(orchestrator.transcribe(audio=None))

    assert excinfo.value.message == "No audio data provided"
    assert transcriber.calls == []


def test_schema_descriptors_bind_models():
    assert ACTIVITY.record_model is ActivityRecord
    assert ONBOARDING.record_model is OnboardingProfile
    assert ACTIVITY.pipeline == "voice_log"
