"""Generic transcript-to-structured-record pipeline.

One orchestrator serves both the voice activity log and the onboarding
parse; the ``SchemaDescriptor`` passed to :meth:`PipelineOrchestrator.run`
selects the prompt template and the record model. Either the full record is
returned or the first stage error is re-raised, tagged with its stage.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, NoReturn, Protocol

from voicelog.services.errors import InputError, PipelineError
from voicelog.services.response_contract import (
    ActivityRecord,
    OnboardingProfile,
    RecordT,
)
from voicelog.services.transcribe import TranscriptionResult
from voicelog.telemetry import record_pipeline_failure, record_pipeline_success

from .flow import PipelineRun, PipelineState
from .ingestion import read_audio_payload
from .prompts import build_extraction_request
from .types import ACTIVITY, ONBOARDING, PipelineResult, SchemaDescriptor

logger = logging.getLogger("voicelog.pipeline")

TRANSCRIBE_PIPELINE = "transcribe"
_LOG_EXCERPT = 100


class Transcriber(Protocol):
    async def transcribe(
        self,
        audio_bytes: bytes,
        *,
        audio_format: str,
        content_type: str,
    ) -> TranscriptionResult: ...


class Extractor(Protocol):
    async def extract(
        self,
        *,
        system_prompt: str,
        transcript: str,
        record_model: type[RecordT],
    ) -> RecordT: ...


def _excerpt(value: str | None) -> str:
    if not value:
        return ""
    if len(value) <= _LOG_EXCERPT:
        return value
    return value[:_LOG_EXCERPT] + "..."


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class PipelineOrchestrator:
    """Wire decoding, transcription, prompting and extraction together."""

    def __init__(self, *, transcriber: Transcriber, extractor: Extractor) -> None:
        self._transcriber = transcriber
        self._extractor = extractor

    async def parse_voice_log(
        self,
        *,
        transcript: str | None = None,
        audio: str | None = None,
        audio_format: str | None = None,
        known_entities: Iterable[str] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> PipelineResult[ActivityRecord]:
        if context:
            logger.info("voice_log context keys=%s", sorted(str(key) for key in context))
        return await self.run(
            ACTIVITY,
            transcript=transcript,
            audio=audio,
            audio_format=audio_format,
            known_entities=known_entities,
            missing_input_message="No transcript or audio provided",
        )

    async def parse_onboarding(
        self,
        *,
        transcript: str | None,
    ) -> PipelineResult[OnboardingProfile]:
        return await self.run(ONBOARDING, transcript=transcript)

    async def transcribe(
        self,
        *,
        audio: str | None,
        audio_format: str | None = None,
    ) -> TranscriptionResult:
        """Decode and transcribe only, for callers that want the text back."""

        if not _has_text(audio):
            self._reject(TRANSCRIBE_PIPELINE, InputError("No audio data provided"))

        run = PipelineRun(TRANSCRIBE_PIPELINE)
        try:
            result = await self._transcribe_audio(run, audio, audio_format)
            run.advance(PipelineState.DONE)
        except PipelineError as exc:
            self._fail(run, exc, transcript=None)
            raise

        record_pipeline_success(TRANSCRIBE_PIPELINE)
        return result

    async def run(
        self,
        schema: SchemaDescriptor[RecordT],
        *,
        transcript: str | None = None,
        audio: str | None = None,
        audio_format: str | None = None,
        known_entities: Iterable[str] | None = None,
        missing_input_message: str = "No transcript provided",
    ) -> PipelineResult[RecordT]:
        """Run the pipeline for ``schema``; audio input takes precedence over text."""

        use_audio = _has_text(audio)
        if not use_audio and not _has_text(transcript):
            self._reject(schema.pipeline, InputError(missing_input_message))

        run = PipelineRun(schema.pipeline)
        text = transcript.strip() if _has_text(transcript) and not use_audio else ""
        try:
            if use_audio:
                result = await self._transcribe_audio(run, audio, audio_format)
                text = result.transcript
                if not text:
                    raise InputError("No speech recognized in audio")

            logger.info("Parsing %s transcript: %s", schema.pipeline, _excerpt(text))

            run.advance(PipelineState.PROMPTING)
            request = build_extraction_request(
                schema,
                text,
                known_entities=known_entities,
            )

            run.advance(PipelineState.EXTRACTING)
            record = await self._extractor.extract(
                system_prompt=request.system_prompt,
                transcript=request.transcript,
                record_model=schema.record_model,
            )
            run.advance(PipelineState.DONE)
        except PipelineError as exc:
            self._fail(run, exc, transcript=text)
            raise

        logger.info(
            "Parsed %s: %s",
            schema.pipeline,
            _excerpt(record.model_dump_json()),
        )
        record_pipeline_success(schema.pipeline)
        return PipelineResult(parsed=record, raw_transcript=text)

    async def _transcribe_audio(
        self,
        run: PipelineRun,
        audio: str | None,
        audio_format: str | None,
    ) -> TranscriptionResult:
        run.advance(PipelineState.DECODING)
        payload = read_audio_payload(audio, audio_format)
        logger.info(
            "Received audio data, format: %s, bytes: %s",
            payload.audio_format,
            len(payload.data),
        )

        run.advance(PipelineState.TRANSCRIBING)
        return await self._transcriber.transcribe(
            payload.data,
            audio_format=payload.audio_format,
            content_type=payload.content_type,
        )

    @staticmethod
    def _reject(pipeline: str, exc: InputError) -> NoReturn:
        exc.stage = PipelineState.IDLE.value
        logger.error("%s rejected before any stage ran: %s", pipeline, exc)
        record_pipeline_failure(pipeline, exc.stage, type(exc).__name__)
        raise exc

    @staticmethod
    def _fail(run: PipelineRun, exc: PipelineError, *, transcript: str | None) -> None:
        failed_in = run.fail()
        if exc.stage is None:
            exc.stage = failed_in.value
        logger.error(
            "%s failed stage=%s error=%s: %s transcript=%r",
            run.pipeline,
            exc.stage,
            type(exc).__name__,
            exc,
            _excerpt(transcript),
        )
        record_pipeline_failure(run.pipeline, exc.stage, type(exc).__name__)


__all__ = [
    "Extractor",
    "PipelineOrchestrator",
    "TRANSCRIBE_PIPELINE",
    "Transcriber",
]
