"""Single-attempt webhook POST that reports failures as data, never raises."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from app.config.settings import WebhookConfig
from app.telemetry import observe_webhook

from .formatters import resolve_formatter
from .signing import signature_header
from .types import WebhookPayload, WebhookResult, WebhookTarget

logger = logging.getLogger("app.services.webhooks")

NO_URL_ERROR = "No webhook URL configured"


@dataclass(frozen=True)
class DeliveryOptions:
    """Header names and limits applied to every outbound webhook."""

    user_agent: str = "EchoFeedback/1.0"
    signature_header: str = "X-Echo-Signature"
    timestamp_header: str = "X-Echo-Timestamp"
    error_body_limit: int = 200

    @classmethod
    def from_config(cls, config: WebhookConfig) -> "DeliveryOptions":
        return cls(
            user_agent=config.user_agent,
            signature_header=config.signature_header,
            timestamp_header=config.timestamp_header,
            error_body_limit=config.error_body_limit,
        )


def _wire_body(rendered: Any) -> Any:
    return rendered.as_dict() if isinstance(rendered, WebhookPayload) else rendered


def build_headers(body: str, target: WebhookTarget, options: DeliveryOptions) -> dict[str, str]:
    """Content headers plus signature/timestamp when the target has a secret."""

    headers = {
        "Content-Type": "application/json",
        "User-Agent": options.user_agent,
    }
    if target.secret:
        headers[options.signature_header] = signature_header(body, target.secret)
        headers[options.timestamp_header] = str(int(time.time() * 1000))
    return headers


async def deliver_webhook(
    payload: WebhookPayload,
    target: WebhookTarget,
    *,
    options: DeliveryOptions | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> WebhookResult:
    """Format, sign and POST ``payload`` to ``target.url`` once."""

    if not target.url:
        return WebhookResult(success=False, error=NO_URL_ERROR)

    options = options or DeliveryOptions()
    platform = "unknown"
    start_time = time.perf_counter()

    try:
        formatter = resolve_formatter(target.url)
        platform = formatter.name
        body = json.dumps(_wire_body(formatter.render(payload, target.url)), ensure_ascii=False)
        headers = build_headers(body, target, options)

        async with httpx.AsyncClient(transport=transport) as client:
            response = await client.post(
                target.url,
                content=body.encode("utf-8"),
                headers=headers,
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        if not response.is_success:
            error_text = response.text[: options.error_body_limit]
            logger.error(
                "Webhook failed (%s) in %.0fms to %s: %s",
                response.status_code,
                duration_ms,
                platform,
                error_text,
            )
            observe_webhook(platform, False, duration_ms / 1000)
            return WebhookResult(
                success=False,
                error=f"HTTP {response.status_code}: {error_text}",
            )

        logger.info("Webhook delivered in %.0fms to %s (%s)", duration_ms, target.url, platform)
        observe_webhook(platform, True, duration_ms / 1000)
        return WebhookResult(success=True)
    except Exception as exc:  # noqa: BLE001
        duration_ms = (time.perf_counter() - start_time) * 1000
        message = str(exc) or type(exc).__name__
        logger.error("Webhook error after %.0fms to %s: %s", duration_ms, platform, message)
        observe_webhook(platform, False, duration_ms / 1000)
        return WebhookResult(success=False, error=message)


__all__ = ["DeliveryOptions", "NO_URL_ERROR", "build_headers", "deliver_webhook"]
