"""Service layer helpers for external integrations."""

from .classifier import ClassificationError, FeedbackClassifier
from .feedback_repository import FeedbackRepository, NewFeedback
from .storage import (
    AudioStorage,
    LocalAudioStorage,
    S3AudioStorage,
    StorageError,
    build_audio_storage,
)
from .transcribe import (
    ElevenLabsTranscriber,
    Transcriber,
    TranscriptionError,
    WhisperTranscriber,
    build_transcriber,
)

__all__ = [
    "AudioStorage",
    "LocalAudioStorage",
    "S3AudioStorage",
    "StorageError",
    "build_audio_storage",
    "ClassificationError",
    "FeedbackClassifier",
    "FeedbackRepository",
    "NewFeedback",
    "ElevenLabsTranscriber",
    "Transcriber",
    "TranscriptionError",
    "WhisperTranscriber",
    "build_transcriber",
]
