"""Fire-and-forget webhook dispatch for freshly persisted feedback."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Optional
from uuid import uuid4

import httpx

from app.models.app_config import AppConfig
from app.models.feedback import WebhookStatus
from app.services.feedback_repository import FeedbackRepository

from .delivery import DeliveryOptions, deliver_webhook
from .types import WebhookPayload, WebhookResult, WebhookTarget

logger = logging.getLogger("app.services.webhooks")


def _target_for(app_config: AppConfig) -> WebhookTarget:
    return WebhookTarget(url=app_config.webhook_url or "", secret=app_config.webhook_secret or None)


def build_test_payload(app_id: str) -> WebhookPayload:
    """Synthetic record used by the test-webhook endpoint."""

    sample = SimpleNamespace(
        id=f"test-{uuid4()}",
        app_id=app_id,
        created_at=datetime.now(timezone.utc),
        transcript="This is a test feedback message.",
        summary="Test webhook delivery",
        category="other",
        sentiment="neutral",
        priority="low",
        audio_url="/uploads/test.webm",
        metadata_={},
    )
    return WebhookPayload.from_feedback(sample)


class WebhookDispatcher:
    """Spawns one detached delivery task per record and records its outcome."""

    def __init__(
        self,
        repository: FeedbackRepository,
        *,
        options: DeliveryOptions | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._repository = repository
        self._options = options or DeliveryOptions()
        self._transport = transport
        self._tasks: set[asyncio.Task[WebhookStatus]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(
        self,
        payload: WebhookPayload,
        app_config: Optional[AppConfig],
    ) -> Optional[asyncio.Task[WebhookStatus]]:
        """Start delivery in the background; returns ``None`` if nothing to send."""

        if app_config is None or not app_config.webhook_url:
            return None

        task = asyncio.create_task(
            self._deliver_and_record(payload, _target_for(app_config)),
            name=f"webhook-{payload.id}",
        )
        # The loop only keeps weak references to tasks.
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _deliver_and_record(self, payload: WebhookPayload, target: WebhookTarget) -> WebhookStatus:
        status = WebhookStatus.FAILED
        try:
            result = await deliver_webhook(
                payload,
                target,
                options=self._options,
                transport=self._transport,
            )
            if result.success:
                status = WebhookStatus.SENT
            else:
                logger.error("Webhook failed for %s: %s", payload.id, result.error)
        except Exception:
            logger.exception("Webhook error for %s", payload.id)

        try:
            await self._repository.update_webhook_status(payload.id, status)
        except Exception:
            logger.exception("Could not record webhook status %s for %s", status.value, payload.id)
        return status

    async def send_test(self, app_config: AppConfig) -> WebhookResult:
        """Deliver a synthetic record synchronously for the test-webhook endpoint."""

        return await deliver_webhook(
            build_test_payload(app_config.app_id),
            _target_for(app_config),
            options=self._options,
            transport=self._transport,
        )

    async def drain(self) -> None:
        """Wait for every in-flight delivery to finish."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


__all__ = ["WebhookDispatcher", "build_test_payload"]
