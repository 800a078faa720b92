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

ANALYSIS_RUNS = Counter(
    "call_analysis_runs_total",
    "Completed pipeline runs by the path that produced the result",
    ("outcome",),
)

ANALYSIS_FALLBACKS = Counter(
    "call_analysis_fallbacks_total",
    "Number of fallback analysis attempts",
)

REMOTE_CALL_LATENCY = Histogram(
    "call_analysis_remote_call_duration_seconds",
    "Latency of calls to the AI provider",
    ("operation",),
    buckets=(0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
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


def record_run(outcome: str) -> None:
    """Count one finished pipeline run (primary/fallback/degraded/failed)."""

    ANALYSIS_RUNS.labels(outcome=outcome).inc()


def record_fallback() -> None:
    ANALYSIS_FALLBACKS.inc()


def observe_remote_call(operation: str, duration_seconds: float) -> None:
    REMOTE_CALL_LATENCY.labels(operation=operation).observe(max(duration_seconds, 0))
