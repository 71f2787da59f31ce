"""Feedback intake chain: validation, storage, providers, persistence and dispatch."""

from __future__ import annotations

import importlib

import pytest

from app.errors import ValidationError
from app.models import FeedbackSource, WebhookStatus
from app.pipelines.feedback import (
    FeedbackIntakePipeline,
    FeedbackPipeline,
    FeedbackSubmission,
    audio_extension,
    parse_metadata,
    parse_source,
)
from app.services.classifier import ClassificationError
from app.services.storage import LocalAudioStorage
from app.services.transcribe import TranscriptionError
from app.services.webhooks import WebhookDispatcher

from conftest import FakeClassifier, FakeTranscriber, WebhookRecorder

MAX_BYTES = 5 * 1024 * 1024


@pytest.fixture
def storage(tmp_path) -> LocalAudioStorage:
    return LocalAudioStorage(tmp_path / "uploads")


def _pipeline(storage, repository, transcriber, classifier, recorder=None, **kwargs):
    dispatcher = WebhookDispatcher(repository, transport=(recorder or WebhookRecorder()).transport)
    pipeline = FeedbackIntakePipeline(
        storage=storage,
        transcriber=transcriber,
        classifier=classifier,
        repository=repository,
        dispatcher=dispatcher,
        max_audio_bytes=MAX_BYTES,
        **kwargs,
    )
    return pipeline, dispatcher


async def test_submit_happy_path(storage, repository):
    transcriber, classifier = FakeTranscriber(), FakeClassifier()
    pipeline, _ = _pipeline(storage, repository, transcriber, classifier)

    result = await pipeline.submit(
        FeedbackSubmission(
            app_id="demo_app",
            audio=b"\x1a\x45\xdf\xa3",
            filename="clip.webm",
            content_type="audio/webm",
            metadata={"pageUrl": "https://example.com"},
            source=FeedbackSource.IOS,
            duration_ms=4200,
        )
    )

    assert result.audio_url == f"/uploads/{result.id}.webm"
    assert (storage.directory / f"{result.id}.webm").read_bytes() == b"\x1a\x45\xdf\xa3"
    assert result.transcript == transcriber.text
    assert classifier.calls == [transcriber.text]
    assert result.as_response()["category"] == "bug"

    stored = await repository.get_feedback(result.id)
    assert stored.webhook_status == WebhookStatus.NONE
    assert stored.source == FeedbackSource.IOS
    assert stored.duration_ms == 4200
    assert stored.metadata_ == {"pageUrl": "https://example.com"}


@pytest.mark.parametrize(
    "submission",
    [
        FeedbackSubmission(app_id=None, audio=b"abc"),
        FeedbackSubmission(app_id="  ", audio=b"abc"),
        FeedbackSubmission(app_id="demo_app", audio=None),
        FeedbackSubmission(app_id="demo_app", audio=b""),
    ],
)
async def test_missing_fields_are_rejected(storage, repository, submission):
    transcriber = FakeTranscriber()
    pipeline, _ = _pipeline(storage, repository, transcriber, FakeClassifier())

    with pytest.raises(ValidationError) as excinfo:
        await pipeline.submit(submission)

    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Missing required fields: appId, audio"
    assert transcriber.calls == []


async def test_oversized_audio_never_reaches_transcriber(storage, repository):
    transcriber = FakeTranscriber()
    pipeline, _ = _pipeline(storage, repository, transcriber, FakeClassifier())

    with pytest.raises(ValidationError) as excinfo:
        await pipeline.submit(FeedbackSubmission(app_id="demo_app", audio=b"0" * (MAX_BYTES + 1)))

    assert excinfo.value.message == "Audio file too large. Max 5MB."
    assert transcriber.calls == []
    assert not storage.directory.exists()


async def test_exactly_max_size_is_accepted(storage, repository):
    pipeline, _ = _pipeline(storage, repository, FakeTranscriber(), FakeClassifier())

    result = await pipeline.submit(FeedbackSubmission(app_id="demo_app", audio=b"0" * MAX_BYTES))

    assert await repository.get_feedback(result.id) is not None


async def test_classification_failure_persists_nothing_and_discards_audio(storage, repository):
    classifier = FakeClassifier(error=ClassificationError("bad json"))
    pipeline, _ = _pipeline(storage, repository, FakeTranscriber(), classifier)

    with pytest.raises(ClassificationError):
        await pipeline.submit(FeedbackSubmission(app_id="demo_app", audio=b"abc"))

    assert await repository.list_feedback("demo_app") == []
    assert list(storage.directory.iterdir()) == []


async def test_persistence_failure_discards_audio(storage, repository, monkeypatch):
    async def fail_create(record):
        raise RuntimeError("db down")

    monkeypatch.setattr(repository, "create_feedback", fail_create)
    pipeline, _ = _pipeline(storage, repository, FakeTranscriber(), FakeClassifier())

    with pytest.raises(RuntimeError):
        await pipeline.submit(FeedbackSubmission(app_id="demo_app", audio=b"abc"))

    assert list(storage.directory.iterdir()) == []


async def test_unexpected_provider_error_discards_audio(storage, repository):
    transcriber = FakeTranscriber(error=ValueError("malformed upstream reply"))
    pipeline, _ = _pipeline(storage, repository, transcriber, FakeClassifier())

    with pytest.raises(ValueError):
        await pipeline.submit(FeedbackSubmission(app_id="demo_app", audio=b"abc"))

    assert list(storage.directory.iterdir()) == []
    assert await repository.list_feedback("demo_app") == []


async def test_transcription_failure_can_keep_audio(storage, repository):
    transcriber = FakeTranscriber(error=TranscriptionError("provider down"))
    classifier = FakeClassifier()
    pipeline, _ = _pipeline(
        storage,
        repository,
        transcriber,
        classifier,
        discard_audio_on_failure=False,
    )

    with pytest.raises(TranscriptionError):
        await pipeline.submit(FeedbackSubmission(app_id="demo_app", audio=b"abc"))

    assert classifier.calls == []
    assert len(list(storage.directory.iterdir())) == 1
    assert await repository.list_feedback("demo_app") == []


async def test_webhook_failure_does_not_affect_submission(storage, repository):
    await repository.upsert_app(
        app_id="demo_app",
        name="Demo",
        webhook_url="https://example.com/hook",
    )
    recorder = WebhookRecorder(status_code=500, body="nope")
    pipeline, dispatcher = _pipeline(
        storage, repository, FakeTranscriber(), FakeClassifier(), recorder=recorder
    )

    result = await pipeline.submit(FeedbackSubmission(app_id="demo_app", audio=b"abc"))
    assert "webhook_status" not in result.as_response()

    await dispatcher.drain()
    stored = await repository.get_feedback(result.id)
    assert stored.webhook_status == WebhookStatus.FAILED
    assert len(recorder.requests) == 1


def test_parse_metadata():
    assert parse_metadata(None) == {}
    assert parse_metadata('{"locale": "en-US"}') == {"locale": "en-US"}
    with pytest.raises(ValidationError):
        parse_metadata("[1, 2]")
    with pytest.raises(ValidationError):
        parse_metadata("{not json")


def test_parse_source():
    assert parse_source(None) is FeedbackSource.WEB
    assert parse_source("Android") is FeedbackSource.ANDROID
    with pytest.raises(ValidationError):
        parse_source("desktop")


@pytest.mark.parametrize(
    ("filename", "content_type", "extension"),
    [
        ("clip.mp3", None, ".mp3"),
        ("clip.WAV", "audio/webm", ".wav"),
        (None, "audio/ogg; codecs=opus", ".ogg"),
        ("blob", "audio/mp4", ".m4a"),
        ("clip.exe", "application/octet-stream", ".webm"),
        (None, None, ".webm"),
    ],
)
def test_audio_extension(filename, content_type, extension):
    assert audio_extension(filename, content_type) == extension


def test_pipeline_map_points_at_real_modules():
    stages = list(FeedbackPipeline.describe())

    assert [stage.order for stage in stages] == [1, 2, 3, 4, 5, 6]
    assert stages[-1].name == "Webhook Dispatch"
    for stage in stages:
        importlib.import_module(stage.module)
