"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    EXTERNAL_CALL_LATENCY,
    FEEDBACK_SUBMISSIONS,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    WEBHOOK_DELIVERIES,
    WEBHOOK_LATENCY,
    increment_submission,
    observe_external_call,
    observe_request,
    observe_webhook,
)

__all__ = [
    "ERROR_COUNTER",
    "EXTERNAL_CALL_LATENCY",
    "FEEDBACK_SUBMISSIONS",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "WEBHOOK_DELIVERIES",
    "WEBHOOK_LATENCY",
    "increment_submission",
    "observe_external_call",
    "observe_request",
    "observe_webhook",
]
