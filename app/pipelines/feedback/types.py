"""Typed containers shared across the feedback intake pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from app.models.feedback import FeedbackSource


@dataclass(frozen=True)
class FeedbackSubmission:
    """One recording as received from the HTTP layer."""

    app_id: Optional[str]
    audio: Optional[bytes]
    filename: Optional[str] = None
    content_type: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source: FeedbackSource = FeedbackSource.WEB
    duration_ms: int = 0


@dataclass(frozen=True)
class IntakeResult:
    """What the submitter gets back; webhook state is deliberately absent."""

    id: str
    transcript: str
    summary: str
    category: str
    sentiment: str
    audio_url: str

    def as_response(self) -> dict[str, str]:
        return {
            "id": self.id,
            "transcript": self.transcript,
            "summary": self.summary,
            "category": self.category,
            "sentiment": self.sentiment,
            "audio_url": self.audio_url,
        }
