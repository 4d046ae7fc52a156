"""Structured request logging for the extraction API."""

from __future__ import annotations

import json
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger("voicelog.middleware.structured")

REQUEST_ID_HEADER = "x-request-id"
MAX_REQUEST_ID_LENGTH = 128

# Path -> pipeline name, so log lines can be grepped per pipeline.
PIPELINE_PATHS: dict[str, str] = {
    "/parse-voice-log": "voice_log",
    "/parse-onboarding": "onboarding",
    "/transcribe": "transcribe",
}

_STATUS_COLORS = (
    (500, "\u001b[31m"),
    (400, "\u001b[33m"),
    (200, "\u001b[32m"),
)
_DEFAULT_COLOR = "\u001b[36m"
_RESET = "\u001b[0m"


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request, tagged with a request id and pipeline name.

    The id is taken from ``x-request-id`` when the caller sends one and is
    echoed back on the response. Pre-flight probes are logged at debug
    level only.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start_time = time.perf_counter()
        request_id = self._resolve_request_id(request)
        request.state.request_id = request_id

        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "pipeline": PIPELINE_PATHS.get(request.url.path),
            "body_bytes": self._content_length(request),
            "client_ip": request.client.host if request.client else None,
        }

        try:
            response = await call_next(request)
        except Exception as exc:
            entry["status_code"] = 500
            entry["duration_ms"] = self._elapsed_ms(start_time)
            entry["error"] = repr(exc)
            logger.exception(self._console_line(entry))
            raise

        entry["status_code"] = response.status_code
        entry["duration_ms"] = self._elapsed_ms(start_time)
        response.headers[REQUEST_ID_HEADER] = request_id

        if request.method == "OPTIONS":
            logger.debug(self._console_line(entry))
        else:
            logger.log(self._level_for(response.status_code), self._console_line(entry))
        logger.debug(json.dumps(entry, default=str, separators=(",", ":")))
        return response

    @staticmethod
    def _resolve_request_id(request: Request) -> str:
        supplied = request.headers.get(REQUEST_ID_HEADER, "").strip()
        if supplied:
            return supplied[:MAX_REQUEST_ID_LENGTH]
        return uuid.uuid4().hex

    @staticmethod
    def _content_length(request: Request) -> int | None:
        """Declared request body size in bytes."""

        raw = request.headers.get("content-length")
        if raw is None or not raw.isdigit():
            return None
        return int(raw)

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return round((time.perf_counter() - start_time) * 1000, 2)

    @staticmethod
    def _level_for(status_code: int) -> int:
        if status_code >= 500:
            return logging.ERROR
        if status_code >= 400:
            return logging.WARNING
        return logging.INFO

    @staticmethod
    def _console_line(entry: dict[str, Any]) -> str:
        status = entry.get("status_code") or 0
        color = next(
            (code for floor, code in _STATUS_COLORS if status >= floor),
            _DEFAULT_COLOR,
        )
        fields = (
            "request_id",
            "method",
            "path",
            "pipeline",
            "status_code",
            "duration_ms",
            "body_bytes",
        )
        message = " ".join(
            f"{name}={entry[name] if entry.get(name) is not None else '-'}"
            for name in fields
        )
        return f"{color}{message}{_RESET}"
