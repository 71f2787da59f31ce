"""Shared fixtures: isolated settings, fake providers and a running test app."""

from __future__ import annotations

from pathlib import Path
import sys
import time
from typing import Callable, Iterator

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from app.config.settings import Settings  # noqa: E402
from app.database import Database  # noqa: E402
from app.models import FeedbackCategory, Priority, Sentiment  # noqa: E402
from app.services.feedback_repository import FeedbackRepository  # noqa: E402
from app.services.response_contract import FeedbackClassification  # noqa: E402
from app.services.transcribe import Transcriber  # noqa: E402
from app.services.webhooks import DeliveryOptions, WebhookDispatcher  # noqa: E402


class FakeTranscriber(Transcriber):
    name = "fake"

    def __init__(self, text: str = "The export button crashes the app.", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[tuple[int, str, str]] = []

    async def transcribe(self, audio, *, filename="audio.webm", content_type="audio/webm"):
        self.calls.append((len(audio), filename, content_type))
        if self.error is not None:
            raise self.error
        return self.text


class FakeClassifier:
    def __init__(self, classification: FeedbackClassification | None = None, error: Exception | None = None):
        self.classification = classification or FeedbackClassification(
            summary="Export crashes",
            category=FeedbackCategory.BUG,
            sentiment=Sentiment.NEGATIVE,
            priority=Priority.HIGH,
            language="en",
        )
        self.error = error
        self.calls: list[str] = []

    async def classify(self, transcript):
        self.calls.append(transcript)
        if self.error is not None:
            raise self.error
        return self.classification


class WebhookRecorder:
    """``httpx.MockTransport`` handler that records requests and replies with a fixed status."""

    def __init__(self, status_code: int = 200, body: str = "ok"):
        self.status_code = status_code
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    monkeypatch.setenv("DATABASE_URL", str(tmp_path / "data.db"))
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.delenv("ELEVEN_API_KEY", raising=False)
    monkeypatch.delenv("STORAGE_BACKEND", raising=False)
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "logs" / "app.log"))
    monkeypatch.setenv("PIPELINE_LOG_FILE", str(tmp_path / "logs" / "pipeline.log"))
    monkeypatch.setenv("TRANSCRIPT_LOG_FILE", str(tmp_path / "logs" / "transcripts.log"))
    monkeypatch.setenv("WEBHOOK_LOG_FILE", str(tmp_path / "logs" / "webhooks.log"))
    return Settings()


@pytest_asyncio.fixture
async def repository(tmp_path: Path) -> FeedbackRepository:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'repo.db'}", pooled=False)
    await database.init_models()
    yield FeedbackRepository(database)
    await database.dispose()


@pytest.fixture
def transcriber() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture
def classifier() -> FakeClassifier:
    return FakeClassifier()


@pytest.fixture
def webhook_recorder() -> WebhookRecorder:
    return WebhookRecorder()


@pytest.fixture
def client(
    settings: Settings,
    transcriber: FakeTranscriber,
    classifier: FakeClassifier,
    webhook_recorder: WebhookRecorder,
) -> Iterator[TestClient]:
    """Running app with fake providers and webhooks answered by ``webhook_recorder``."""

    from app.main import create_app

    app = create_app(settings)
    with TestClient(app) as test_client:
        app.state.transcriber = transcriber
        app.state.classifier = classifier
        app.state.dispatcher = WebhookDispatcher(
            app.state.repository,
            options=DeliveryOptions.from_config(settings.webhooks),
            transport=webhook_recorder.transport,
        )
        yield test_client


@pytest.fixture
def wait_for_webhook_status() -> Callable[[TestClient, str], str]:
    def _wait(client: TestClient, feedback_id: str, timeout: float = 5.0) -> str:
        deadline = time.monotonic() + timeout
        status = "none"
        while time.monotonic() < deadline:
            status = client.get(f"/api/feedback/{feedback_id}").json()["webhook_status"]
            if status != "none":
                return status
            time.sleep(0.02)
        return status

    return _wait


