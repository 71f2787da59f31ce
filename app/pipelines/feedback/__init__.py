"""Feedback intake pipeline package.

Modules are organised by the order in which `/api/feedback` executes:

1. `ingestion` – validate the upload and parse its form fields.
2. `intake` – store, transcribe, classify, persist and dispatch the webhook.
3. `flow` – human-readable description of the end-to-end stages.
"""

from .flow import FeedbackPipeline, PipelineStage
from .ingestion import (
    audio_extension,
    parse_duration,
    parse_metadata,
    parse_source,
    validate_submission,
)
from .intake import DEFAULT_MAX_AUDIO_BYTES, FeedbackIntakePipeline
from .types import FeedbackSubmission, IntakeResult

__all__ = [
    "DEFAULT_MAX_AUDIO_BYTES",
    "FeedbackIntakePipeline",
    "FeedbackPipeline",
    "FeedbackSubmission",
    "IntakeResult",
    "PipelineStage",
    "audio_extension",
    "parse_duration",
    "parse_metadata",
    "parse_source",
    "validate_submission",
]
