"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    PIPELINE_FAILURES,
    PIPELINE_RUNS,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    UPSTREAM_LATENCY,
    observe_request,
    observe_upstream,
    record_pipeline_failure,
    record_pipeline_success,
)

__all__ = [
    "ERROR_COUNTER",
    "PIPELINE_FAILURES",
    "PIPELINE_RUNS",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "UPSTREAM_LATENCY",
    "observe_request",
    "observe_upstream",
    "record_pipeline_failure",
    "record_pipeline_success",
]
