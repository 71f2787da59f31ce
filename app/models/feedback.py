"""SQLAlchemy model for transcribed and classified voice feedback."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, Column, DateTime
from sqlalchemy import Enum as SqlEnum
from sqlalchemy import ForeignKey, Integer, String, Text

from app.models.base import Base


class FeedbackSource(str, Enum):
    """Capture channel of a recording."""

    WEB = "web"
    IOS = "ios"
    ANDROID = "android"


class FeedbackCategory(str, Enum):
    BUG = "bug"
    FEATURE = "feature"
    PRAISE = "praise"
    OTHER = "other"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class WebhookStatus(str, Enum):
    """Outcome of the asynchronous webhook delivery for a record."""

    NONE = "none"
    SENT = "sent"
    FAILED = "failed"


def _enum_column(enum_cls: type[Enum], name: str) -> SqlEnum:
    return SqlEnum(
        enum_cls,
        name=name,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )


class FeedbackItem(Base):
    __tablename__ = "feedback_items"

    id = Column(String(64), primary_key=True)
    app_id = Column(
        String(128),
        ForeignKey("apps.app_id"),
        nullable=False,
        index=True,
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        index=True,
    )
    source = Column(
        _enum_column(FeedbackSource, "feedback_source"),
        nullable=False,
        default=FeedbackSource.WEB,
    )
    duration_ms = Column(Integer, nullable=False, default=0)
    audio_url = Column(Text, nullable=False)
    transcript = Column(Text, nullable=False)
    summary = Column(Text, nullable=False)
    category = Column(_enum_column(FeedbackCategory, "feedback_category"), nullable=False)
    sentiment = Column(_enum_column(Sentiment, "feedback_sentiment"), nullable=False)
    priority = Column(_enum_column(Priority, "feedback_priority"), nullable=False)
    # ``metadata`` is reserved on declarative classes.
    metadata_ = Column("metadata", JSON, nullable=False, default=dict)
    webhook_status = Column(
        _enum_column(WebhookStatus, "webhook_status"),
        nullable=False,
        default=WebhookStatus.NONE,
    )


__all__ = [
    "FeedbackItem",
    "FeedbackSource",
    "FeedbackCategory",
    "Sentiment",
    "Priority",
    "WebhookStatus",
]
