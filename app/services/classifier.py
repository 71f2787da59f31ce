"""OpenAI chat-completions client that classifies feedback transcripts."""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import httpx
from pydantic import ValidationError

from app.config.settings import OpenAIConfig
from app.services.response_contract import FeedbackClassification, ResponseContractError
from app.telemetry import observe_external_call

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a classifier for user feedback. Output strict JSON only."

_USER_PROMPT_TEMPLATE = '''Feedback transcript:
"""
{transcript}
"""

Return JSON with:
- summary (string)
- category (bug|feature|praise|other)
- sentiment (positive|neutral|negative)
- priority (low|medium|high)
- language (BCP-47 code)'''

_CLASSIFY_TIMEOUT = httpx.Timeout(30.0, connect=10.0)


class ClassificationError(RuntimeError):
    """Raised when the language model call or its response is unusable."""


def build_messages(transcript: str) -> list[dict[str, str]]:
    """Return the system/user message pair sent to the summarizer model."""

    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": _USER_PROMPT_TEMPLATE.format(transcript=transcript)},
    ]


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


class FeedbackClassifier:
    """Ask the configured model for summary, category, sentiment, priority and language."""

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        temperature: float = 0.3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._endpoint = f"{base_url.rstrip('/')}/chat/completions"
        self._temperature = temperature
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        config: OpenAIConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "FeedbackClassifier":
        if config.api_key is None:
            logger.warning("OPENAI_API_KEY not set. Feedback classification will fail.")
        return cls(
            api_key=config.api_key.get_secret_value() if config.api_key else None,
            model=config.summarizer_model,
            base_url=config.base_url,
            temperature=config.summarizer_temperature,
            transport=transport,
        )

    @property
    def model(self) -> str:
        return self._model

    async def classify(self, transcript: str) -> FeedbackClassification:
        if not transcript or not transcript.strip():
            raise ClassificationError("Cannot classify an empty transcript.")
        if not self._api_key:
            raise ClassificationError("OpenAI API key is not configured.")

        start_time = time.perf_counter()
        success = False
        try:
            content = await self._complete(transcript)
            classification = self._parse(content)
            success = True
        except ClassificationError as exc:
            logger.error("OpenAI classification failed: %s", exc)
            raise
        finally:
            observe_external_call("classification", success, time.perf_counter() - start_time)

        logger.info(
            "GPT classification completed in %.0fms using %s",
            (time.perf_counter() - start_time) * 1000,
            self._model,
        )
        return classification

    async def _complete(self, transcript: str) -> str:
        body: dict[str, Any] = {
            "model": self._model,
            "messages": build_messages(transcript),
            "response_format": {"type": "json_object"},
            "temperature": self._temperature,
        }
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=_CLASSIFY_TIMEOUT,
            ) as client:
                response = await client.post(
                    self._endpoint,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    json=body,
                )
        except httpx.HTTPError as exc:
            raise ClassificationError(f"OpenAI request failed: {exc}") from exc

        if not response.is_success:
            raise ClassificationError(f"OpenAI API error: {response.status_code} - {response.text}")

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (json.JSONDecodeError, UnicodeDecodeError, KeyError, IndexError, TypeError) as exc:
            raise ClassificationError("No content in OpenAI response") from exc

        if not isinstance(content, str) or not content.strip():
            raise ClassificationError("No content in OpenAI response")
        return content

    def _parse(self, content: str) -> FeedbackClassification:
        try:
            return FeedbackClassification.from_json(content)
        except (ResponseContractError, ValidationError) as exc:
            logger.warning("Unusable classification payload: %s", _truncate(content))
            raise ClassificationError("Invalid classification response from OpenAI") from exc


__all__ = [
    "ClassificationError",
    "FeedbackClassifier",
    "SYSTEM_PROMPT",
    "build_messages",
]
