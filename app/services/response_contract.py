"""Pydantic models for validating LLM JSON responses.

The classifier runs the model output through these schemas so downstream
code receives normalized, enum-typed values instead of raw strings.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.feedback import FeedbackCategory, Priority, Sentiment


class FeedbackClassification(BaseModel):
    summary: str = Field(min_length=1)
    category: FeedbackCategory
    sentiment: Sentiment
    priority: Priority
    language: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("summary", mode="before")
    @classmethod
    def strip_summary(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("category", "sentiment", "priority", mode="before")
    @classmethod
    def normalize_label(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("language", mode="before")
    @classmethod
    def blank_language(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip() or None
        return None

    @classmethod
    def from_json(cls, payload: str) -> "FeedbackClassification":
        """Parse model output, raising ``ResponseContractError`` on bad JSON
        and ``pydantic.ValidationError`` when required keys are missing or
        hold values outside the allowed labels."""

        cleaned = _clean_json_payload(payload)
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ResponseContractError(f"Classification is not valid JSON: {exc}") from exc
        return cls.model_validate(data)


class ResponseContractError(RuntimeError):
    """Raised when the LLM response contract cannot be validated."""


def _clean_json_payload(payload: str) -> str:
    """Strip Markdown code blocks and find the first/last brace to extract JSON."""
    if not payload:
        return ""

    cleaned = payload.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]

    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    cleaned = cleaned.strip()

    start = cleaned.find("{")
    end = cleaned.rfind("}")

    if start != -1 and end != -1 and end > start:
        cleaned = cleaned[start : end + 1]

    return cleaned


__all__ = [
    "FeedbackClassification",
    "ResponseContractError",
]
