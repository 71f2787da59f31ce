"""Pydantic schemas used as views in the MVC architecture."""

from .apps import AppResponse, AppUpsertRequest, WebhookTestResponse
from .common import ErrorResponse
from .feedback import FeedbackRecordResponse, FeedbackSubmissionResponse

__all__ = [
    "AppResponse",
    "AppUpsertRequest",
    "WebhookTestResponse",
    "ErrorResponse",
    "FeedbackRecordResponse",
    "FeedbackSubmissionResponse",
]
