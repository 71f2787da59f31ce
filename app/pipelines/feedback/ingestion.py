"""Request ingestion helpers (Stage 01 of the feedback pipeline)."""

from __future__ import annotations

import json
import mimetypes
from pathlib import PurePath
from typing import Any, Final

from app.errors import ValidationError
from app.models.feedback import FeedbackSource

from .types import FeedbackSubmission

SUPPORTED_AUDIO_EXTENSIONS: Final[tuple[str, ...]] = (".webm", ".mp3", ".wav", ".m4a", ".ogg")
DEFAULT_AUDIO_EXTENSION: Final[str] = ".webm"

_CONTENT_TYPE_EXTENSIONS: Final[dict[str, str]] = {
    "audio/webm": ".webm",
    "audio/mpeg": ".mp3",
    "audio/mp3": ".mp3",
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/wave": ".wav",
    "audio/mp4": ".m4a",
    "audio/m4a": ".m4a",
    "audio/x-m4a": ".m4a",
    "audio/ogg": ".ogg",
}


def parse_metadata(raw: str | None) -> dict[str, Any]:
    """Decode the optional ``metadata`` form field into a JSON object."""

    if raw is None or not raw.strip():
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError("Invalid metadata: must be a JSON object") from exc
    if not isinstance(value, dict):
        raise ValidationError("Invalid metadata: must be a JSON object")
    return value


def parse_source(raw: str | None) -> FeedbackSource:
    if raw is None or not raw.strip():
        return FeedbackSource.WEB
    try:
        return FeedbackSource(raw.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(source.value for source in FeedbackSource)
        raise ValidationError(f"Invalid source. Expected one of: {allowed}") from exc


def parse_duration(raw: str | int | None) -> int:
    if raw is None or raw == "":
        return 0
    try:
        duration = int(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Invalid durationMs: must be a non-negative integer") from exc
    if duration < 0:
        raise ValidationError("Invalid durationMs: must be a non-negative integer")
    return duration


def audio_extension(filename: str | None, content_type: str | None) -> str:
    """Pick a supported file extension for the stored recording."""

    if filename:
        suffix = PurePath(filename).suffix.lower()
        if suffix in SUPPORTED_AUDIO_EXTENSIONS:
            return suffix

    if content_type:
        base_type = content_type.split(";", 1)[0].strip().lower()
        if base_type in _CONTENT_TYPE_EXTENSIONS:
            return _CONTENT_TYPE_EXTENSIONS[base_type]
        guessed = mimetypes.guess_extension(base_type)
        if guessed in SUPPORTED_AUDIO_EXTENSIONS:
            return guessed

    return DEFAULT_AUDIO_EXTENSION


def validate_submission(submission: FeedbackSubmission, *, max_audio_bytes: int) -> None:
    """Reject incomplete or oversized submissions before any external call."""

    if not submission.app_id or not submission.app_id.strip() or not submission.audio:
        raise ValidationError("Missing required fields: appId, audio")

    if len(submission.audio) > max_audio_bytes:
        max_mb = max_audio_bytes // (1024 * 1024)
        raise ValidationError(f"Audio file too large. Max {max_mb}MB.")


__all__ = [
    "DEFAULT_AUDIO_EXTENSION",
    "SUPPORTED_AUDIO_EXTENSIONS",
    "audio_extension",
    "parse_duration",
    "parse_metadata",
    "parse_source",
    "validate_submission",
]
