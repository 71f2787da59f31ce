"""SQLAlchemy models for the feedback service."""

from .base import Base
from .app_config import AppConfig  # noqa: F401
from .feedback import (  # noqa: F401
    FeedbackCategory,
    FeedbackItem,
    FeedbackSource,
    Priority,
    Sentiment,
    WebhookStatus,
)

__all__ = [
    "Base",
    "AppConfig",
    "FeedbackItem",
    "FeedbackSource",
    "FeedbackCategory",
    "Sentiment",
    "Priority",
    "WebhookStatus",
]
