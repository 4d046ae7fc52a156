"""Prometheus instrumentation for incoming HTTP requests."""

from __future__ import annotations

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from voicelog.telemetry import observe_request

# Excluded from the request series.
UNMETERED_PATHS = frozenset({"/metrics", "/health"})


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Count requests and time them per route template."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path in UNMETERED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            observe_request(
                request.method,
                self._route_label(request),
                status_code,
                time.perf_counter() - started,
            )

    @staticmethod
    def _route_label(request: Request) -> str:
        """Route template when one matched, else the raw path."""

        route = request.scope.get("route")
        return getattr(route, "path", None) or request.url.path
