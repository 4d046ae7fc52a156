"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
    ),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

PIPELINE_RUNS = Counter(
    "pipeline_runs_total",
    "Extraction pipeline invocations by outcome",
    ("pipeline", "outcome"),
)

PIPELINE_FAILURES = Counter(
    "pipeline_failures_total",
    "Extraction pipeline failures by stage and error category",
    ("pipeline", "stage", "error"),
)

UPSTREAM_LATENCY = Histogram(
    "upstream_request_duration_seconds",
    "Outbound provider call duration in seconds",
    ("provider",),
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    status_label = str(status_code)
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=status_label,
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def record_pipeline_success(pipeline: str) -> None:
    """Count a pipeline run that produced a full record."""

    PIPELINE_RUNS.labels(pipeline=pipeline, outcome="done").inc()


def record_pipeline_failure(pipeline: str, stage: str, error: str) -> None:
    """Count a failed pipeline run against the stage that raised."""

    PIPELINE_RUNS.labels(pipeline=pipeline, outcome="failed").inc()
    PIPELINE_FAILURES.labels(pipeline=pipeline, stage=stage, error=error).inc()


def observe_upstream(provider: str, duration_seconds: float) -> None:
    """Record how long one outbound provider call took."""

    UPSTREAM_LATENCY.labels(provider=provider).observe(max(duration_seconds, 0))
