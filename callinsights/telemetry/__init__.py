"""Telemetry helpers and metrics."""

from .metrics import (
    ANALYSIS_FALLBACKS,
    ANALYSIS_RUNS,
    ERROR_COUNTER,
    REMOTE_CALL_LATENCY,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    observe_remote_call,
    observe_request,
    record_fallback,
    record_run,
)

__all__ = [
    "ANALYSIS_FALLBACKS",
    "ANALYSIS_RUNS",
    "ERROR_COUNTER",
    "REMOTE_CALL_LATENCY",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "observe_remote_call",
    "observe_request",
    "record_fallback",
    "record_run",
]
