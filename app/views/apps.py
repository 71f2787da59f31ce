"""Pydantic schemas for registered client applications."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AppUpsertRequest(BaseModel):
    """Payload for creating or updating an app; required keys are checked by the controller."""

    app_id: Optional[str] = Field(None, max_length=128)
    name: Optional[str] = Field(None, max_length=200)
    webhook_url: Optional[str] = None
    webhook_secret: Optional[str] = None


class AppResponse(BaseModel):
    """Serialized app; the webhook secret is never exposed."""

    app_id: str
    name: str
    has_webhook: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WebhookTestResponse(BaseModel):
    success: bool
    error: Optional[str] = None
    message: str


__all__ = ["AppResponse", "AppUpsertRequest", "WebhookTestResponse"]
