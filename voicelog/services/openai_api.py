"""Shared OpenAI HTTP helpers for service clients."""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import httpx
from pydantic import SecretStr

from voicelog.services.errors import ConfigurationError, UpstreamUnavailable
from voicelog.telemetry import observe_upstream

logger = logging.getLogger(__name__)

PROVIDER = "openai"
_MAX_BODY_LOG = 500


def require_api_key(api_key: SecretStr | str | None) -> str:
    """Return the raw credential or fail before any request is attempted."""

    if isinstance(api_key, SecretStr):
        api_key = api_key.get_secret_value()
    if not api_key or not api_key.strip():
        logger.error("OPENAI_API_KEY not configured")
        raise ConfigurationError("OpenAI API key not configured")
    return api_key.strip()


def create_http_client(
    *,
    base_url: str,
    api_key: str,
    timeout_seconds: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Instantiate an AsyncClient bound to the OpenAI base URL and credential."""

    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        headers={"Authorization": f"Bearer {api_key}"},
        timeout=timeout_seconds,
        transport=transport,
    )


async def post_within(
    client: httpx.AsyncClient,
    path: str,
    *,
    timeout_seconds: float,
    **kwargs: Any,
) -> httpx.Response:
    """POST with one deadline covering the whole exchange, not each httpx phase."""

    return await asyncio.wait_for(client.post(path, **kwargs), timeout=timeout_seconds)


@asynccontextmanager
async def upstream_call(operation: str) -> AsyncIterator[None]:
    """Translate transport failures into ``UpstreamUnavailable`` and record latency."""

    started = time.perf_counter()
    try:
        yield
    except httpx.TimeoutException as exc:
        logger.error("OpenAI %s timed out: %s", operation, exc)
        raise UpstreamUnavailable(
            f"OpenAI API timed out during {operation}",
            provider=PROVIDER,
        ) from exc
    except asyncio.TimeoutError as exc:
        logger.error("OpenAI %s exceeded its deadline", operation)
        raise UpstreamUnavailable(
            f"OpenAI API timed out during {operation}",
            provider=PROVIDER,
        ) from exc
    except httpx.RequestError as exc:
        logger.error("OpenAI %s request failed: %s", operation, exc)
        raise UpstreamUnavailable(
            f"Unable to reach OpenAI API: {exc}",
            provider=PROVIDER,
        ) from exc
    finally:
        observe_upstream(f"{PROVIDER}.{operation}", time.perf_counter() - started)


def raise_for_upstream_status(response: httpx.Response, operation: str) -> None:
    """Raise ``UpstreamUnavailable`` carrying status and body for non-2xx answers."""

    if response.is_success:
        return

    body = response.text
    logger.error(
        "OpenAI API error during %s: %s %s",
        operation,
        response.status_code,
        body[:_MAX_BODY_LOG],
    )
    raise UpstreamUnavailable(
        f"OpenAI API error: {response.status_code}",
        provider=PROVIDER,
        upstream_status=response.status_code,
        body=body,
    )


__all__ = [
    "PROVIDER",
    "create_http_client",
    "post_within",
    "raise_for_upstream_status",
    "require_api_key",
    "upstream_call",
]
