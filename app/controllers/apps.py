"""Client application registration and webhook test endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.controllers.dependencies import DispatcherDep, RepositoryDep
from app.errors import ApiError, NotFoundError, ValidationError
from app.services.feedback_repository import DEFAULT_PAGE_SIZE
from app.views import (
    AppResponse,
    AppUpsertRequest,
    ErrorResponse,
    FeedbackRecordResponse,
    WebhookTestResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/apps", tags=["apps"])

_WEBHOOK_URL = TypeAdapter(HttpUrl)


def _validate_webhook_url(value: str | None) -> str | None:
    """Return the URL unchanged when it is an absolute http(s) URL."""

    if not value:
        return None
    try:
        _WEBHOOK_URL.validate_python(value)
    except PydanticValidationError as exc:
        raise ValidationError("Invalid webhook URL format") from exc
    return value


@router.post(
    "",
    response_model=AppResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upsert_app(payload: AppUpsertRequest, repository: RepositoryDep) -> AppResponse:
    if not payload.app_id or not payload.name:
        raise ValidationError("Missing required fields: app_id, name")

    webhook_url = _validate_webhook_url(payload.webhook_url)

    try:
        app_config = await repository.upsert_app(
            app_id=payload.app_id,
            name=payload.name,
            webhook_url=webhook_url,
            webhook_secret=payload.webhook_secret,
        )
    except Exception as exc:
        logger.error("Failed to create/update app %s: %s", payload.app_id, exc)
        raise ApiError("Failed to create/update app") from exc

    logger.info("App %s saved (webhook=%s)", app_config.app_id, app_config.has_webhook)
    return AppResponse.model_validate(app_config)


@router.get(
    "/{app_id}",
    response_model=AppResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_app(app_id: str, repository: RepositoryDep) -> AppResponse:
    app_config = await repository.get_app(app_id)
    if app_config is None:
        raise NotFoundError("App not found")
    return AppResponse.model_validate(app_config)


@router.get("/{app_id}/feedback", response_model=list[FeedbackRecordResponse])
async def list_app_feedback(
    app_id: str,
    repository: RepositoryDep,
    limit: Annotated[int, Query(ge=1, le=200)] = DEFAULT_PAGE_SIZE,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[FeedbackRecordResponse]:
    """List stored feedback for an app, newest first."""

    items = await repository.list_feedback(app_id, limit=limit, offset=offset)
    return [FeedbackRecordResponse.model_validate(item) for item in items]


@router.post(
    "/{app_id}/test-webhook",
    response_model=WebhookTestResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def test_webhook(
    app_id: str,
    repository: RepositoryDep,
    dispatcher: DispatcherDep,
) -> WebhookTestResponse:
    """Send a synthetic record to the app's webhook and report the outcome."""

    app_config = await repository.get_app(app_id)
    if app_config is None:
        raise NotFoundError("App not found")
    if not app_config.webhook_url:
        raise ValidationError("No webhook configured for this app")

    result = await dispatcher.send_test(app_config)
    return WebhookTestResponse(
        success=result.success,
        error=result.error,
        message="Test webhook sent successfully" if result.success else "Test webhook failed",
    )


__all__ = ["router"]
