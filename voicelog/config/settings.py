from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class OpenAIConfig(BaseSettings):
    """OpenAI configuration shared by transcription and extraction."""

    api_key: Optional[SecretStr] = None
    base_url: str = "https://api.openai.com/v1"
    chat_model: str = "gpt-4o-mini"
    transcription_model: str = "whisper-1"
    transcription_language: str = "en"
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    timeout_seconds: float = Field(default=30.0, gt=0.0)

    model_config = SettingsConfigDict(
        env_prefix="OPENAI_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class GoogleConfig(BaseSettings):
    """Google Sheets OAuth client secret, only inspected by diagnostics."""

    oauth_credentials: Optional[SecretStr] = Field(
        default=None,
        validation_alias="GOOGLE_OAUTH_CREDENTIALS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Voicelog Backend"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/pipeline.log"

    # OpenAI
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)

    # Google
    google: GoogleConfig = Field(default_factory=GoogleConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = False
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = [
        "authorization",
        "x-client-info",
        "apikey",
        "content-type",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
