"""Repository helpers for reading/writing feedback records and tenant config."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy import select, update

from app.database import Database
from app.models.app_config import AppConfig
from app.models.feedback import (
    FeedbackCategory,
    FeedbackItem,
    FeedbackSource,
    Priority,
    Sentiment,
    WebhookStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50


@dataclass(frozen=True)
class NewFeedback:
    """Values captured by the intake pipeline for a new record."""

    id: str
    app_id: str
    audio_url: str
    transcript: str
    summary: str
    category: FeedbackCategory
    sentiment: Sentiment
    priority: Priority
    source: FeedbackSource = FeedbackSource.WEB
    duration_ms: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)


class FeedbackRepository:
    """Persistence operations used by the core; one session per call."""

    def __init__(self, database: Database) -> None:
        self._database = database

    async def create_feedback(self, record: NewFeedback) -> FeedbackItem:
        item = FeedbackItem(
            id=record.id,
            app_id=record.app_id,
            source=record.source,
            duration_ms=max(0, int(record.duration_ms or 0)),
            audio_url=record.audio_url,
            transcript=record.transcript,
            summary=record.summary,
            category=record.category,
            sentiment=record.sentiment,
            priority=record.priority,
            metadata_=dict(record.metadata or {}),
            webhook_status=WebhookStatus.NONE,
        )
        async with self._database.session_scope() as session:
            session.add(item)
            await session.commit()
            await session.refresh(item)

        logger.debug("Persisted feedback id=%s app=%s", item.id, item.app_id)
        return item

    async def get_feedback(self, feedback_id: str) -> Optional[FeedbackItem]:
        async with self._database.session_scope() as session:
            return await session.get(FeedbackItem, feedback_id)

    async def list_feedback(
        self,
        app_id: str,
        *,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[FeedbackItem]:
        """Return the newest feedback for an app first."""

        async with self._database.session_scope() as session:
            result = await session.execute(
                select(FeedbackItem)
                .where(FeedbackItem.app_id == app_id)
                .order_by(FeedbackItem.created_at.desc())
                .limit(limit)
                .offset(offset)
            )
            return list(result.scalars().all())

    async def update_webhook_status(self, feedback_id: str, status: WebhookStatus) -> None:
        async with self._database.session_scope() as session:
            await session.execute(
                update(FeedbackItem)
                .where(FeedbackItem.id == feedback_id)
                .values(webhook_status=status)
            )
            await session.commit()

    async def get_app(self, app_id: str) -> Optional[AppConfig]:
        async with self._database.session_scope() as session:
            return await session.get(AppConfig, app_id)

    async def upsert_app(
        self,
        *,
        app_id: str,
        name: str,
        webhook_url: Optional[str] = None,
        webhook_secret: Optional[str] = None,
    ) -> AppConfig:
        """Create the app or overwrite its name/webhook settings, keeping created_at."""

        async with self._database.session_scope() as session:
            app_config = await session.get(AppConfig, app_id)
            if app_config is None:
                app_config = AppConfig(app_id=app_id)
                session.add(app_config)

            app_config.name = name
            app_config.webhook_url = webhook_url or None
            app_config.webhook_secret = webhook_secret or None

            await session.commit()
            await session.refresh(app_config)
            return app_config


__all__ = ["DEFAULT_PAGE_SIZE", "FeedbackRepository", "NewFeedback"]
