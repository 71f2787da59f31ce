"""Feedback intake and lookup endpoints."""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, File, Form, UploadFile

from app.controllers.dependencies import PipelineDep, RepositoryDep, SettingsDep
from app.errors import ApiError, NotFoundError, ValidationError
from app.pipelines.feedback import (
    FeedbackSubmission,
    parse_duration,
    parse_metadata,
    parse_source,
)
from app.views import ErrorResponse, FeedbackRecordResponse, FeedbackSubmissionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/feedback", tags=["feedback"])


@router.post(
    "",
    response_model=FeedbackSubmissionResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def submit_feedback(
    pipeline: PipelineDep,
    settings: SettingsDep,
    app_id: Annotated[Optional[str], Form(alias="appId")] = None,
    audio: Annotated[Optional[UploadFile], File()] = None,
    metadata: Annotated[Optional[str], Form()] = None,
    source: Annotated[Optional[str], Form()] = None,
    duration_ms: Annotated[Optional[str], Form(alias="durationMs")] = None,
) -> FeedbackSubmissionResponse:
    """Accept one recording and return its transcript and classification."""

    # Reject before buffering when the multipart parser already knows the size.
    limit = settings.intake.max_audio_bytes
    if app_id and audio is not None and audio.size is not None and audio.size > limit:
        raise ValidationError(f"Audio file too large. Max {settings.intake.max_audio_megabytes}MB.")

    submission = FeedbackSubmission(
        app_id=app_id,
        audio=await audio.read() if audio is not None else None,
        filename=audio.filename if audio is not None else None,
        content_type=audio.content_type if audio is not None else None,
        metadata=parse_metadata(metadata),
        source=parse_source(source),
        duration_ms=parse_duration(duration_ms),
    )

    try:
        result = await pipeline.submit(submission)
    except ApiError:
        raise
    except Exception as exc:
        logger.error("Feedback processing failed for app=%s: %s", app_id, exc)
        raise ApiError("Failed to process feedback") from exc

    return FeedbackSubmissionResponse(**result.as_response())


@router.get(
    "/{feedback_id}",
    response_model=FeedbackRecordResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_feedback(feedback_id: str, repository: RepositoryDep) -> FeedbackRecordResponse:
    item = await repository.get_feedback(feedback_id)
    if item is None:
        raise NotFoundError("Feedback not found")
    return FeedbackRecordResponse.model_validate(item)


__all__ = ["router"]
