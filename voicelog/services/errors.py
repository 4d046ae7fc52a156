"""Error taxonomy shared by every pipeline stage.

Each error carries the HTTP status the API layer should answer with and the
name of the pipeline stage that raised it, so the exception handler in
``voicelog.main`` can render a uniform ``{"error": ...}`` envelope.
"""

from __future__ import annotations

from typing import ClassVar


class PipelineError(RuntimeError):
    """Base class for failures raised while running an extraction pipeline."""

    status_code: ClassVar[int] = 500
    retryable: ClassVar[bool] = False

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage

    @property
    def http_status(self) -> int:
        return self.status_code


class InputError(PipelineError):
    """A required request field is missing, empty, or unsupported."""

    status_code = 400


class DecodingError(PipelineError):
    """The audio payload is not valid base64."""

    status_code = 400


class ConfigurationError(PipelineError):
    """A provider credential or setting is missing."""


class UpstreamUnavailable(PipelineError):
    """A dependency answered with a non-success status, timed out, or was unreachable."""

    retryable = True

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        upstream_status: int | None = None,
        body: str | None = None,
        stage: str | None = None,
    ) -> None:
        super().__init__(message, stage=stage)
        self.provider = provider
        self.upstream_status = upstream_status
        self.body = body

    @property
    def http_status(self) -> int:
        # Forward the provider's own status when it is an error status.
        if self.upstream_status is not None and self.upstream_status >= 400:
            return self.upstream_status
        return self.status_code


class MalformedUpstreamResponse(PipelineError):
    """A dependency answered successfully but its content broke the contract."""


__all__ = [
    "PipelineError",
    "InputError",
    "DecodingError",
    "ConfigurationError",
    "UpstreamUnavailable",
    "MalformedUpstreamResponse",
]
