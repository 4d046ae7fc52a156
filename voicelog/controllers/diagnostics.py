"""Read-only diagnostic endpoints.

Nothing here requires authentication or calls a provider; the reports only
describe whether credentials are present and well-formed, never their values.
"""

import json
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request
from pydantic import SecretStr

from voicelog.controllers.dependencies import SettingsDep
from voicelog.pipelines.extraction import ExtractionPipeline
from voicelog.views import (
    CredentialDiagnosticsResponse,
    GoogleCredentialReport,
    GoogleCredentialStructure,
    OpenAICredentialReport,
    PipelineMapResponse,
    PipelineStageView,
)

router = APIRouter(prefix="/diagnostics", tags=["diagnostics"])


def _secret_value(secret: SecretStr | None) -> str:
    return secret.get_secret_value() if secret is not None else ""


def inspect_google_credentials(raw: str) -> GoogleCredentialReport:
    """Describe the shape of a Google OAuth client secret JSON document."""

    if not raw:
        return GoogleCredentialReport(has_secret=False, secret_length=0, is_valid_json=False)

    try:
        parsed: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        return GoogleCredentialReport(
            has_secret=True,
            secret_length=len(raw),
            is_valid_json=False,
            parse_error=str(exc),
        )

    web = parsed.get("web") if isinstance(parsed, dict) else None
    web = web if isinstance(web, dict) else {}
    return GoogleCredentialReport(
        has_secret=True,
        secret_length=len(raw),
        is_valid_json=True,
        credential_structure=GoogleCredentialStructure(
            has_web=bool(web),
            has_client_id=bool(web.get("client_id")),
            has_client_secret=bool(web.get("client_secret")),
            has_auth_uri=bool(web.get("auth_uri")),
            has_token_uri=bool(web.get("token_uri")),
            has_redirect_uris=bool(web.get("redirect_uris")),
        ),
    )


@router.get("/credentials", response_model=CredentialDiagnosticsResponse)
async def credential_diagnostics(
    request: Request,
    config: SettingsDep,
) -> CredentialDiagnosticsResponse:
    """Report credential presence and shape without performing any extraction."""

    openai_key = _secret_value(config.openai.api_key)
    pipeline_error = request.app.state.pipeline_error

    return CredentialDiagnosticsResponse(
        openai=OpenAICredentialReport(
            has_secret=bool(openai_key.strip()),
            secret_length=len(openai_key),
            pipeline_ready=pipeline_error is None,
            configuration_error=str(pipeline_error) if pipeline_error else None,
        ),
        google=inspect_google_credentials(_secret_value(config.google.oauth_credentials)),
        timestamp=datetime.now(timezone.utc).isoformat(),
        message="Direct secret test - no authentication required",
    )


@router.get("/pipeline", response_model=PipelineMapResponse)
async def pipeline_map() -> PipelineMapResponse:
    """Return the ordered stage map for audio and text input."""

    def _stages(audio: bool) -> list[PipelineStageView]:
        return [
            PipelineStageView(
                order=stage.order,
                state=stage.state.value,
                module=stage.module,
                summary=stage.summary,
            )
            for stage in ExtractionPipeline.describe(audio=audio)
        ]

    return PipelineMapResponse(audio=_stages(True), text=_stages(False))
