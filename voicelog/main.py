"""Application entry point and FastAPI app factory."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import sys
from pathlib import Path

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config.dependencies import build_orchestrator
from .config.settings import Settings, settings
from .controllers import diagnostics, onboarding, transcribe, voice_log
from .middleware import StructuredLoggingMiddleware, TelemetryMiddleware
from .services.errors import ConfigurationError, PipelineError

logger = logging.getLogger(__name__)


_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_PIPELINE_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def _rotating_handler(path: str, max_bytes: int, fmt: str) -> RotatingFileHandler:
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _configure_logging(config: Settings) -> None:
    """Route app logs to stdout and ``log_file``, pipeline logs to their own file.

    The request middleware logger prints bare colored lines to stdout and
    does not propagate; the pipeline logger writes stage transitions and
    transcript excerpts to ``pipeline_log_file`` in addition to the root
    handlers.
    """

    level = logging.DEBUG if config.debug else logging.INFO

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(logging.Formatter(_LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(_rotating_handler(config.log_file, 1_000_000, _LOG_FORMAT))
    root_logger.setLevel(level)

    middleware_logger = logging.getLogger("voicelog.middleware.structured")
    middleware_logger.handlers.clear()
    middleware_stdout = logging.StreamHandler(sys.stdout)
    middleware_stdout.setFormatter(logging.Formatter("%(message)s"))
    middleware_logger.addHandler(middleware_stdout)
    middleware_logger.setLevel(level)
    middleware_logger.propagate = False

    pipeline_logger = logging.getLogger("voicelog.pipeline")
    pipeline_logger.handlers.clear()
    pipeline_logger.addHandler(
        _rotating_handler(config.pipeline_log_file, 500_000, _PIPELINE_LOG_FORMAT)
    )
    pipeline_logger.setLevel(level)

    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def create_app(
    config: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    config = config or settings
    _configure_logging(config)

    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        debug=config.debug,
        description="Voice and text to structured business record extraction API",
    )

    # Credentials are checked once here; requests reuse the outcome.
    app.state.settings = config
    app.state.orchestrator = None
    app.state.pipeline_error = None
    try:
        app.state.orchestrator = build_orchestrator(config, transport=transport)
    except ConfigurationError as exc:
        logger.error("Extraction pipeline disabled: %s", exc)
        app.state.pipeline_error = exc

    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.cors_allow_credentials,
        allow_methods=config.cors_allow_methods,
        allow_headers=config.cors_allow_headers,
    )

    app.include_router(voice_log.router)
    app.include_router(onboarding.router)
    app.include_router(transcribe.router)
    app.include_router(diagnostics.router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        """Root endpoint."""

        return {
            "message": f"Welcome to {config.app_name}",
            "version": config.app_version,
            "status": "operational",
        }

    @app.get("/health", include_in_schema=False)
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""

        return {
            "status": "healthy" if app.state.pipeline_error is None else "degraded",
            "service": config.app_name,
            "version": config.app_version,
        }

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose application metrics for Prometheus scraping."""

        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(PipelineError)
    async def pipeline_exception_handler(request: Request, exc: PipelineError):
        return JSONResponse(
            status_code=exc.http_status,
            content={"error": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
            for error in exc.errors()
        )
        logger.warning("Rejected request body url=%s: %s", request.url.path, problems)
        return JSONResponse(
            status_code=400,
            content={"error": f"Invalid request body: {problems}"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error url=%s", request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "voicelog.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
