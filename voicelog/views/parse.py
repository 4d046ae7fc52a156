"""Request/response schemas for the parsing and transcription endpoints."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from voicelog.services.response_contract import ActivityRecord, OnboardingProfile


class KnownClient(BaseModel):
    name: Optional[str] = None

    model_config = {"extra": "ignore"}


class VoiceLogRequest(BaseModel):
    transcript: Optional[str] = None
    audio: Optional[str] = None
    audio_format: Optional[str] = Field(default=None, alias="format")
    clients: List[KnownClient] = Field(default_factory=list)
    context: Optional[Dict[str, Any]] = None

    model_config = {"populate_by_name": True}

    @field_validator("clients", mode="before")
    @classmethod
    def default_clients(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def client_names(self) -> list[str]:
        return [client.name for client in self.clients if client.name]


class OnboardingRequest(BaseModel):
    transcript: Optional[str] = None


class TranscribeRequest(BaseModel):
    audio: Optional[str] = None
    audio_format: Optional[str] = Field(default=None, alias="format")

    model_config = {"populate_by_name": True}


class ActivityParseResponse(BaseModel):
    parsed: ActivityRecord
    raw_transcript: str


class OnboardingParseResponse(BaseModel):
    parsed: OnboardingProfile
    raw_transcript: str


class TranscribeResponse(BaseModel):
    transcript: str
