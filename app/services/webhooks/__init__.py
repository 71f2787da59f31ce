"""Outbound webhook subsystem: formatting, signing, delivery and dispatch."""

from .delivery import NO_URL_ERROR, DeliveryOptions, deliver_webhook
from .dispatcher import WebhookDispatcher, build_test_payload
from .formatters import detect_platform, format_payload
from .signing import generate_signature, signature_header, verify_signature
from .types import WebhookPayload, WebhookResult, WebhookTarget

__all__ = [
    "DeliveryOptions",
    "NO_URL_ERROR",
    "WebhookDispatcher",
    "WebhookPayload",
    "WebhookResult",
    "WebhookTarget",
    "build_test_payload",
    "deliver_webhook",
    "detect_platform",
    "format_payload",
    "generate_signature",
    "signature_header",
    "verify_signature",
]
