"""Typed containers shared by the webhook formatter, delivery and dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional


def _label(value: Any) -> str:
    return str(getattr(value, "value", value))


def _isoformat(value: datetime | str | None) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        value = datetime.now(timezone.utc)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class WebhookTarget:
    """Where to deliver and, optionally, the secret to sign with."""

    url: str
    secret: Optional[str] = None


@dataclass(frozen=True)
class WebhookResult:
    success: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class WebhookPayload:
    """Delivery-time projection of a feedback record; never persisted."""

    id: str
    app_id: str
    timestamp: str
    transcript: str
    summary: str
    category: str
    sentiment: str
    priority: str
    audio_url: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_feedback(cls, item: Any) -> "WebhookPayload":
        """Build the payload from a ``FeedbackItem`` (or anything shaped like one)."""

        return cls(
            id=item.id,
            app_id=item.app_id,
            timestamp=_isoformat(getattr(item, "created_at", None)),
            transcript=item.transcript,
            summary=item.summary,
            category=_label(item.category),
            sentiment=_label(item.sentiment),
            priority=_label(item.priority),
            audio_url=item.audio_url,
            metadata=dict(getattr(item, "metadata_", None) or {}),
        )

    def as_dict(self) -> dict[str, Any]:
        """Generic wire shape, also used verbatim for unknown destinations."""

        return {
            "id": self.id,
            "appId": self.app_id,
            "timestamp": self.timestamp,
            "transcript": self.transcript,
            "summary": self.summary,
            "category": self.category,
            "sentiment": self.sentiment,
            "priority": self.priority,
            "audioUrl": self.audio_url,
            "metadata": dict(self.metadata),
        }


__all__ = ["WebhookPayload", "WebhookResult", "WebhookTarget"]
