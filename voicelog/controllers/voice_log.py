"""Voice activity log parsing endpoint.

POST `/parse-voice-log` accepts either a transcript or base64 audio plus the
caller's known clients and returns a validated ``ActivityRecord``. With audio
the request runs decode → transcribe → prompt → extract; with text only it
starts at the prompt stage.
"""

from typing import Any

from fastapi import APIRouter, Response, status

from voicelog.controllers.dependencies import OrchestratorDep
from voicelog.views import ActivityParseResponse, ErrorResponse, VoiceLogRequest

router = APIRouter(tags=["parsing"])

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


@router.options("/parse-voice-log", include_in_schema=False)
async def parse_voice_log_preflight() -> Response:
    """Answer the empty-body pre-flight probe."""

    return Response(status_code=status.HTTP_200_OK)


@router.post(
    "/parse-voice-log",
    response_model=ActivityParseResponse,
    responses=_ERROR_RESPONSES,
)
async def parse_voice_log(
    request: VoiceLogRequest,
    orchestrator: OrchestratorDep,
) -> dict[str, Any]:
    """Turn a spoken or typed activity log into a structured activity record."""

    result = await orchestrator.parse_voice_log(
        transcript=request.transcript,
        audio=request.audio,
        audio_format=request.audio_format,
        known_entities=request.client_names,
        context=request.context,
    )
    return result.to_payload()
