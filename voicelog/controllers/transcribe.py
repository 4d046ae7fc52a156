"""Transcription-only endpoint backed by Whisper."""

from fastapi import APIRouter, Response, status

from voicelog.controllers.dependencies import OrchestratorDep
from voicelog.views import ErrorResponse, TranscribeRequest, TranscribeResponse

router = APIRouter(tags=["transcription"])


@router.options("/transcribe", include_in_schema=False)
async def transcribe_preflight() -> Response:
    """Answer the empty-body pre-flight probe."""

    return Response(status_code=status.HTTP_200_OK)


@router.post(
    "/transcribe",
    response_model=TranscribeResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def transcribe(
    request: TranscribeRequest,
    orchestrator: OrchestratorDep,
) -> TranscribeResponse:
    """Decode base64 audio and return the recognized text."""

    result = await orchestrator.transcribe(
        audio=request.audio,
        audio_format=request.audio_format,
    )
    return TranscribeResponse(transcript=result.transcript)
