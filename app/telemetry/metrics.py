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

EXTERNAL_CALL_LATENCY = Histogram(
    "external_call_duration_seconds",
    "Duration of speech-to-text and language model calls",
    ("service", "outcome"),
    buckets=(0.25, 0.5, 1.0, 2.0, 4.0, 8.0, 16.0, 32.0, 64.0),
)

FEEDBACK_SUBMISSIONS = Counter(
    "feedback_submissions_total",
    "Feedback submissions by pipeline outcome",
    ("outcome",),
)

WEBHOOK_DELIVERIES = Counter(
    "webhook_deliveries_total",
    "Outbound webhook deliveries by destination platform and outcome",
    ("platform", "outcome"),
)

WEBHOOK_LATENCY = Histogram(
    "webhook_delivery_duration_seconds",
    "Outbound webhook delivery duration in seconds",
    ("platform",),
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
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


def observe_external_call(service: str, success: bool, duration_seconds: float) -> None:
    """Record the latency of one transcription or classification call."""

    EXTERNAL_CALL_LATENCY.labels(
        service=service,
        outcome="success" if success else "failure",
    ).observe(max(duration_seconds, 0))


def observe_webhook(platform: str, success: bool, duration_seconds: float) -> None:
    """Record the outcome and latency of one webhook POST."""

    WEBHOOK_DELIVERIES.labels(
        platform=platform,
        outcome="success" if success else "failure",
    ).inc()
    WEBHOOK_LATENCY.labels(platform=platform).observe(max(duration_seconds, 0))


def increment_submission(outcome: str) -> None:
    FEEDBACK_SUBMISSIONS.labels(outcome=outcome).inc()
