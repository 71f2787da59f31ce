"""Pydantic schemas for feedback resources."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.models.feedback import (
    FeedbackCategory,
    FeedbackSource,
    Priority,
    Sentiment,
    WebhookStatus,
)


class FeedbackSubmissionResponse(BaseModel):
    """Returned to the submitter; never includes webhook state."""

    id: str
    transcript: str
    summary: str
    category: FeedbackCategory
    sentiment: Sentiment
    audio_url: str


class FeedbackRecordResponse(BaseModel):
    """Serialized representation of a stored feedback record."""

    id: str
    app_id: str
    created_at: datetime
    source: FeedbackSource
    duration_ms: int
    audio_url: str
    transcript: str
    summary: str
    category: FeedbackCategory
    sentiment: Sentiment
    priority: Priority
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="metadata_")
    webhook_status: WebhookStatus

    model_config = ConfigDict(from_attributes=True)


__all__ = ["FeedbackRecordResponse", "FeedbackSubmissionResponse"]
