"""SQLAlchemy model for registered client applications (tenants)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text

from app.models.base import Base


class AppConfig(Base):
    __tablename__ = "apps"

    app_id = Column(String(128), primary_key=True)
    name = Column(String(200), nullable=False)
    webhook_url = Column(Text, nullable=True)
    webhook_secret = Column(Text, nullable=True)
    created_at = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
    )

    @property
    def has_webhook(self) -> bool:
        return bool(self.webhook_url)


__all__ = ["AppConfig"]
