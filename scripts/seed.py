"""Populate the database with a demo app and a few sample feedback items."""

import asyncio
import logging
import os
import sys
from datetime import datetime, timedelta

# Add project root to path so we can import app
sys.path.append(os.getcwd())

from app.config.settings import settings
from app.database import Database
from app.models import AppConfig, FeedbackCategory, FeedbackItem, Priority, Sentiment, WebhookStatus

logger = logging.getLogger("scripts.seed")

DEMO_APP_ID = "demo_app"

SAMPLE_FEEDBACK = [
    {
        "id": "sample-1",
        "age": timedelta(days=1),
        "duration_ms": 5000,
        "transcript": "The new dashboard is really intuitive and easy to use. Great work!",
        "summary": "Positive feedback on new dashboard design",
        "category": FeedbackCategory.PRAISE,
        "sentiment": Sentiment.POSITIVE,
        "priority": Priority.LOW,
        "metadata": {"pageUrl": "https://example.com/dashboard", "locale": "en-US"},
    },
    {
        "id": "sample-2",
        "age": timedelta(hours=12),
        "duration_ms": 8000,
        "transcript": "I found a bug where the submit button does not work on mobile devices.",
        "summary": "Submit button not working on mobile",
        "category": FeedbackCategory.BUG,
        "sentiment": Sentiment.NEGATIVE,
        "priority": Priority.HIGH,
        "metadata": {"pageUrl": "https://example.com/form", "device": "mobile"},
    },
    {
        "id": "sample-3",
        "age": timedelta(hours=2),
        "duration_ms": 6500,
        "transcript": "It would be great to have dark mode support for the application.",
        "summary": "Feature request: dark mode support",
        "category": FeedbackCategory.FEATURE,
        "sentiment": Sentiment.NEUTRAL,
        "priority": Priority.MEDIUM,
        "metadata": {"pageUrl": "https://example.com/settings"},
    },
]


async def seed(database: Database) -> int:
    """Insert or replace the demo app and sample feedback; returns the item count."""

    await database.init_models()
    now = datetime.utcnow()

    async with database.session_scope() as session:
        await session.merge(
            AppConfig(app_id=DEMO_APP_ID, name="Demo Application", created_at=now)
        )
        for sample in SAMPLE_FEEDBACK:
            await session.merge(
                FeedbackItem(
                    id=sample["id"],
                    app_id=DEMO_APP_ID,
                    created_at=now - sample["age"],
                    duration_ms=sample["duration_ms"],
                    audio_url=f"/uploads/{sample['id']}.webm",
                    transcript=sample["transcript"],
                    summary=sample["summary"],
                    category=sample["category"],
                    sentiment=sample["sentiment"],
                    priority=sample["priority"],
                    metadata_=sample["metadata"],
                    webhook_status=WebhookStatus.NONE,
                )
            )
            logger.info("Sample feedback %s (%s)", sample["id"], sample["category"].value)
        await session.commit()

    return len(SAMPLE_FEEDBACK)


async def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    logger.info("Seeding database at %s", settings.database.url)

    database = Database(settings.database.url, pooled=False)
    try:
        count = await seed(database)
    finally:
        await database.dispose()

    logger.info("Created demo app %s with %d sample feedback items", DEMO_APP_ID, count)


if __name__ == "__main__":
    asyncio.run(main())
