"""High-level orchestration map for the feedback intake pipeline.

``FeedbackIntakePipeline.submit`` in ``intake`` performs these stages in
order for each recording; the table below exists so contributors can find
the module behind each step.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in the intake pipeline."""

    order: int
    name: str
    module: str
    summary: str


class FeedbackPipeline:
    """Utility wrapper for documenting the `/api/feedback` flow."""

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            "Validation",
            "app.pipelines.feedback.ingestion",
            "Require appId and audio, enforce the audio size ceiling, parse metadata.",
        ),
        PipelineStage(
            2,
            "Audio Storage",
            "app.services.storage",
            "Write the recording under an id-derived filename and return its public URL.",
        ),
        PipelineStage(
            3,
            "Transcription",
            "app.services.transcribe",
            "Send the audio to the configured speech-to-text provider (ElevenLabs or Whisper).",
        ),
        PipelineStage(
            4,
            "Classification",
            "app.services.classifier",
            "Ask the summarizer model for summary, category, sentiment, priority and language.",
        ),
        PipelineStage(
            5,
            "Persistence",
            "app.services.feedback_repository",
            "Insert the feedback record with webhook_status=none.",
        ),
        PipelineStage(
            6,
            "Webhook Dispatch",
            "app.services.webhooks.dispatcher",
            "Deliver to the tenant webhook in a detached task and record sent/failed.",
        ),
    ]

    @classmethod
    def describe(cls) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES)


__all__ = ["FeedbackPipeline", "PipelineStage"]
