"""Common FastAPI dependencies reused across controllers.

Everything here reads the components built at startup from ``app.state``,
so tests can swap any of them after the application has started.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.config.settings import Settings
from app.pipelines.feedback import FeedbackIntakePipeline
from app.services.feedback_repository import FeedbackRepository
from app.services.webhooks import WebhookDispatcher


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> FeedbackRepository:
    return request.app.state.repository


def get_dispatcher(request: Request) -> WebhookDispatcher:
    return request.app.state.dispatcher


def get_pipeline(request: Request) -> FeedbackIntakePipeline:
    """Assemble the intake pipeline from the components on ``app.state``."""

    state = request.app.state
    settings: Settings = state.settings
    return FeedbackIntakePipeline(
        storage=state.storage,
        transcriber=state.transcriber,
        classifier=state.classifier,
        repository=state.repository,
        dispatcher=state.dispatcher,
        max_audio_bytes=settings.intake.max_audio_bytes,
        discard_audio_on_failure=settings.storage.discard_audio_on_failure,
    )


SettingsDep = Annotated[Settings, Depends(get_settings)]
RepositoryDep = Annotated[FeedbackRepository, Depends(get_repository)]
DispatcherDep = Annotated[WebhookDispatcher, Depends(get_dispatcher)]
PipelineDep = Annotated[FeedbackIntakePipeline, Depends(get_pipeline)]


__all__ = [
    "DispatcherDep",
    "PipelineDep",
    "RepositoryDep",
    "SettingsDep",
    "get_dispatcher",
    "get_pipeline",
    "get_repository",
    "get_settings",
]
