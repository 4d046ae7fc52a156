"""Onboarding introduction parsing endpoint."""

from typing import Any

from fastapi import APIRouter, Response, status

from voicelog.controllers.dependencies import OrchestratorDep
from voicelog.views import ErrorResponse, OnboardingParseResponse, OnboardingRequest

router = APIRouter(tags=["parsing"])


@router.options("/parse-onboarding", include_in_schema=False)
async def parse_onboarding_preflight() -> Response:
    """Answer the empty-body pre-flight probe."""

    return Response(status_code=status.HTTP_200_OK)


@router.post(
    "/parse-onboarding",
    response_model=OnboardingParseResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def parse_onboarding(
    request: OnboardingRequest,
    orchestrator: OrchestratorDep,
) -> dict[str, Any]:
    """Extract a business profile from the user's spoken introduction."""

    result = await orchestrator.parse_onboarding(transcript=request.transcript)
    return result.to_payload()
