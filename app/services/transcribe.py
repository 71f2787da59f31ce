"""Speech-to-text integrations (ElevenLabs Scribe and OpenAI Whisper)."""

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Mapping

import httpx

from app.config.settings import Settings
from app.errors import ConfigurationError
from app.telemetry import observe_external_call

logger = logging.getLogger(__name__)

_TRANSCRIBE_TIMEOUT = httpx.Timeout(60.0, connect=10.0)


class TranscriptionError(RuntimeError):
    """Raised when the speech-to-text provider fails to produce a transcript."""


class Transcriber(ABC):
    """Capability interface shared by every speech-to-text provider."""

    name: str = "transcriber"

    @abstractmethod
    async def transcribe(
        self,
        audio: bytes,
        *,
        filename: str = "audio.webm",
        content_type: str = "audio/webm",
    ) -> str:
        """Return the plain-text transcript for ``audio``."""


class _HttpTranscriber(Transcriber):
    """Shared request/response handling for multipart speech-to-text APIs."""

    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport

    @property
    @abstractmethod
    def endpoint(self) -> str:
        ...

    @abstractmethod
    def _headers(self) -> dict[str, str]:
        ...

    @abstractmethod
    def _form_fields(self) -> dict[str, str]:
        ...

    def _extract_text(self, payload: Mapping[str, Any]) -> str | None:
        text = payload.get("text")
        return text if isinstance(text, str) else None

    async def transcribe(
        self,
        audio: bytes,
        *,
        filename: str = "audio.webm",
        content_type: str = "audio/webm",
    ) -> str:
        if not audio:
            raise TranscriptionError("The uploaded audio file is empty.")

        start_time = time.perf_counter()
        success = False
        try:
            text = await self._request_transcript(audio, filename, content_type)
            success = True
        except TranscriptionError as exc:
            logger.error("%s transcription failed: %s", self.name, exc)
            raise
        finally:
            observe_external_call(
                f"transcription.{self.name}",
                success,
                time.perf_counter() - start_time,
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info("STT transcription completed in %.0fms using %s", duration_ms, self.name)
        return text

    async def _request_transcript(self, audio: bytes, filename: str, content_type: str) -> str:
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=_TRANSCRIBE_TIMEOUT,
            ) as client:
                response = await client.post(
                    self.endpoint,
                    headers=self._headers(),
                    data=self._form_fields(),
                    files={"file": (filename, audio, content_type)},
                )
        except httpx.HTTPError as exc:
            raise TranscriptionError(f"{self.name} request failed: {exc}") from exc

        if not response.is_success:
            raise TranscriptionError(
                f"{self.name} API error: {response.status_code} - {response.text}"
            )

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise TranscriptionError(f"{self.name} returned a non-JSON response") from exc

        text = self._extract_text(payload) if isinstance(payload, Mapping) else None
        if not text or not text.strip():
            raise TranscriptionError(f"No transcript text in {self.name} response")

        if isinstance(payload, Mapping) and payload.get("language_code"):
            logger.debug("%s detected language %s", self.name, payload["language_code"])
        return text.strip()


class ElevenLabsTranscriber(_HttpTranscriber):
    """ElevenLabs Scribe; language is auto-detected."""

    name = "elevenlabs"

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.elevenlabs.io/v1",
        model_id: str = "scribe_v1",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(transport=transport)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model_id = model_id

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/speech-to-text"

    def _headers(self) -> dict[str, str]:
        return {"xi-api-key": self._api_key}

    def _form_fields(self) -> dict[str, str]:
        return {"model_id": self._model_id}


class WhisperTranscriber(_HttpTranscriber):
    """OpenAI Whisper with a pinned language and deterministic decoding."""

    name = "whisper"

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.openai.com/v1",
        model: str = "whisper-1",
        language: str | None = "en",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(transport=transport)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._language = language

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/audio/transcriptions"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    def _form_fields(self) -> dict[str, str]:
        fields = {"model": self._model, "temperature": "0"}
        if self._language:
            # Skipping auto-detection saves a few hundred milliseconds.
            fields["language"] = self._language
        return fields


def build_transcriber(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Transcriber:
    """Pick the speech-to-text provider for this process from configured credentials."""

    if settings.elevenlabs.api_key is not None:
        return ElevenLabsTranscriber(
            settings.elevenlabs.api_key.get_secret_value(),
            base_url=settings.elevenlabs.base_url,
            model_id=settings.elevenlabs.model_id,
            transport=transport,
        )

    if settings.openai.api_key is not None:
        return WhisperTranscriber(
            settings.openai.api_key.get_secret_value(),
            base_url=settings.openai.base_url,
            model=settings.openai.whisper_model,
            language=settings.openai.whisper_language or None,
            transport=transport,
        )

    raise ConfigurationError(
        "OPENAI_API_KEY is required when not using ElevenLabs. "
        "Set ELEVEN_API_KEY or OPENAI_API_KEY in your environment."
    )


__all__ = [
    "ElevenLabsTranscriber",
    "Transcriber",
    "TranscriptionError",
    "WhisperTranscriber",
    "build_transcriber",
]
