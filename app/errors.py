"""Error taxonomy shared by the controllers and the intake pipeline."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import status


class ApiError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class ValidationError(ApiError):
    """Bad or missing client input."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ApiError):
    """Referenced tenant or resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ConfigurationError(RuntimeError):
    """Raised at startup when required provider credentials are missing."""


__all__ = ["ApiError", "ValidationError", "NotFoundError", "ConfigurationError"]
