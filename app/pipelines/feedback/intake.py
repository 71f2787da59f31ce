"""Feedback intake orchestration.

One call to ``FeedbackIntakePipeline.submit`` walks a recording through
validation, storage, transcription, classification and persistence, then
hands the stored record to the webhook dispatcher without waiting on it.
"""

from __future__ import annotations

import logging
from uuid import uuid4

from app.models.feedback import FeedbackItem
from app.services.classifier import FeedbackClassifier
from app.services.feedback_repository import FeedbackRepository, NewFeedback
from app.services.storage import AudioStorage, StorageError
from app.services.transcribe import Transcriber
from app.services.webhooks import WebhookDispatcher, WebhookPayload
from app.telemetry import increment_submission

from .ingestion import audio_extension, validate_submission
from .types import FeedbackSubmission, IntakeResult

logger = logging.getLogger("app.pipelines.feedback")
transcript_logger = logging.getLogger("app.logs.transcript")

DEFAULT_MAX_AUDIO_BYTES = 5 * 1024 * 1024


class FeedbackIntakePipeline:
    """Sequential intake chain for one submitted recording."""

    def __init__(
        self,
        *,
        storage: AudioStorage,
        transcriber: Transcriber,
        classifier: FeedbackClassifier,
        repository: FeedbackRepository,
        dispatcher: WebhookDispatcher,
        max_audio_bytes: int = DEFAULT_MAX_AUDIO_BYTES,
        discard_audio_on_failure: bool = True,
    ) -> None:
        self._storage = storage
        self._transcriber = transcriber
        self._classifier = classifier
        self._repository = repository
        self._dispatcher = dispatcher
        self._max_audio_bytes = max_audio_bytes
        self._discard_audio_on_failure = discard_audio_on_failure

    async def submit(self, submission: FeedbackSubmission) -> IntakeResult:
        try:
            validate_submission(submission, max_audio_bytes=self._max_audio_bytes)
        except Exception:
            increment_submission("rejected")
            raise

        app_id = submission.app_id.strip()
        audio = submission.audio
        feedback_id = str(uuid4())
        filename = f"{feedback_id}{audio_extension(submission.filename, submission.content_type)}"
        content_type = submission.content_type or "audio/webm"

        try:
            audio_url = await self._storage.store(audio, filename, content_type=content_type)
        except StorageError:
            increment_submission("failed")
            logger.exception("Audio storage failed id=%s app=%s", feedback_id, app_id)
            raise

        try:
            transcript = await self._transcriber.transcribe(
                audio,
                filename=filename,
                content_type=content_type,
            )
            transcript_logger.info("app=%s | id=%s | text=%s", app_id, feedback_id, transcript)
            classification = await self._classifier.classify(transcript)
            item = await self._repository.create_feedback(
                NewFeedback(
                    id=feedback_id,
                    app_id=app_id,
                    audio_url=audio_url,
                    transcript=transcript,
                    summary=classification.summary,
                    category=classification.category,
                    sentiment=classification.sentiment,
                    priority=classification.priority,
                    source=submission.source,
                    duration_ms=submission.duration_ms,
                    metadata=submission.metadata,
                )
            )
        except Exception:
            increment_submission("failed")
            logger.exception("Feedback processing failed id=%s app=%s", feedback_id, app_id)
            await self._discard_audio(filename)
            raise

        logger.info(
            "Feedback stored id=%s app=%s category=%s sentiment=%s priority=%s language=%s",
            feedback_id,
            app_id,
            classification.category.value,
            classification.sentiment.value,
            classification.priority.value,
            classification.language or "-",
        )
        increment_submission("accepted")

        await self._dispatch_webhook(item)

        return IntakeResult(
            id=feedback_id,
            transcript=transcript,
            summary=classification.summary,
            category=classification.category.value,
            sentiment=classification.sentiment.value,
            audio_url=audio_url,
        )

    async def _dispatch_webhook(self, item: FeedbackItem) -> None:
        """Kick off delivery if the tenant has a webhook; never blocks on it."""

        try:
            app_config = await self._repository.get_app(item.app_id)
            task = self._dispatcher.dispatch(WebhookPayload.from_feedback(item), app_config)
        except Exception:
            # The record is already stored; a lookup problem must not fail the submission.
            logger.exception("Could not schedule webhook for id=%s", item.id)
            return

        if task is not None:
            logger.info("Webhook scheduled id=%s app=%s", item.id, item.app_id)

    async def _discard_audio(self, filename: str) -> None:
        if not self._discard_audio_on_failure:
            return
        try:
            await self._storage.delete(filename)
        except StorageError:
            logger.warning("Could not remove orphaned audio %s", filename, exc_info=True)


__all__ = ["DEFAULT_MAX_AUDIO_BYTES", "FeedbackIntakePipeline"]
