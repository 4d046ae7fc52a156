"""Schemas for the read-only diagnostic endpoints."""

from typing import List, Optional

from pydantic import BaseModel


class OpenAICredentialReport(BaseModel):
    has_secret: bool
    secret_length: int
    pipeline_ready: bool
    configuration_error: Optional[str] = None


class GoogleCredentialStructure(BaseModel):
    has_web: bool
    has_client_id: bool
    has_client_secret: bool
    has_auth_uri: bool
    has_token_uri: bool
    has_redirect_uris: bool


class GoogleCredentialReport(BaseModel):
    has_secret: bool
    secret_length: int
    is_valid_json: bool
    parse_error: Optional[str] = None
    credential_structure: Optional[GoogleCredentialStructure] = None


class CredentialDiagnosticsResponse(BaseModel):
    openai: OpenAICredentialReport
    google: GoogleCredentialReport
    timestamp: str
    message: str


class PipelineStageView(BaseModel):
    order: int
    state: str
    module: str
    summary: str


class PipelineMapResponse(BaseModel):
    audio: List[PipelineStageView]
    text: List[PipelineStageView]
