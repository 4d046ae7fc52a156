"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from voicelog.config.settings import Settings
from voicelog.pipelines.extraction import PipelineOrchestrator
from voicelog.services.errors import ConfigurationError


def get_settings(request: Request) -> Settings:
    """Return the settings the application was created with."""

    return request.app.state.settings


def get_orchestrator(request: Request) -> PipelineOrchestrator:
    """Return the pipeline built at startup, or re-raise why it could not be built."""

    configuration_error = request.app.state.pipeline_error
    if configuration_error is not None:
        raise ConfigurationError(configuration_error.message)
    return request.app.state.orchestrator


SettingsDep = Annotated[Settings, Depends(get_settings)]
OrchestratorDep = Annotated[PipelineOrchestrator, Depends(get_orchestrator)]


__all__ = ["get_orchestrator", "get_settings", "OrchestratorDep", "SettingsDep"]
