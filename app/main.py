"""Application entry point and FastAPI app factory."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import sys
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException

from .config.settings import Settings, settings as default_settings
from .controllers import apps, feedback
from .database import Database
from .errors import ApiError
from .middleware import StructuredLoggingMiddleware, TelemetryMiddleware
from .services.classifier import FeedbackClassifier
from .services.feedback_repository import FeedbackRepository
from .services.storage import build_audio_storage
from .services.transcribe import build_transcriber
from .services.webhooks import DeliveryOptions, WebhookDispatcher

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _rotating_handler(path: str, *, max_bytes: int) -> RotatingFileHandler:
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def _configure_logging(settings: Settings) -> None:
    """Stream logs to stdout and split pipeline, transcript and webhook logs into files."""

    logging.getLogger().handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(_rotating_handler(settings.log_file, max_bytes=1_000_000))
    root_logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

    middleware_logger = logging.getLogger("app.middleware.structured")
    middleware_logger.handlers.clear()
    middleware_stdout = logging.StreamHandler(sys.stdout)
    middleware_stdout.setFormatter(logging.Formatter("%(message)s"))
    middleware_logger.addHandler(middleware_stdout)
    middleware_logger.setLevel(logging.INFO)
    middleware_logger.propagate = False

    dedicated_logs = {
        "app.pipelines.feedback": settings.pipeline_log_file,
        "app.logs.transcript": settings.transcript_log_file,
        "app.services.webhooks": settings.webhook_log_file,
    }
    for name, path in dedicated_logs.items():
        dedicated_logger = logging.getLogger(name)
        dedicated_logger.handlers.clear()
        dedicated_logger.addHandler(_rotating_handler(path, max_bytes=500_000))
        dedicated_logger.setLevel(logging.INFO)

    noisy_loggers = [
        "httpx",
        "httpcore",
        "botocore",
        "boto3",
        "urllib3",
        "sqlalchemy.engine",
    ]
    for name in noisy_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def _error_response(status_code: int, message: str, details: Optional[dict] = None) -> JSONResponse:
    content: dict = {"error": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or default_settings
    _configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        database = Database(settings.database.url, echo=settings.debug)
        await database.init_models()

        repository = FeedbackRepository(database)
        app.state.database = database
        app.state.repository = repository
        app.state.storage = build_audio_storage(settings)
        app.state.transcriber = build_transcriber(settings)
        app.state.classifier = FeedbackClassifier.from_config(settings.openai)
        app.state.dispatcher = WebhookDispatcher(
            repository,
            options=DeliveryOptions.from_config(settings.webhooks),
        )
        app.state.started_at = time.monotonic()

        logger.info(
            "%s %s ready: transcription=%s summarizer=%s storage=%s",
            settings.app_name,
            settings.app_version,
            app.state.transcriber.name,
            settings.openai.summarizer_model,
            settings.storage.backend,
        )
        try:
            yield
        finally:
            await app.state.dispatcher.drain()
            await database.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        description="Echo voice feedback intake and webhook relay API",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.include_router(feedback.router)
    app.include_router(apps.router)

    @app.get("/health", include_in_schema=False)
    async def health_check(request: Request) -> dict:
        """Health check endpoint."""

        started_at = getattr(request.app.state, "started_at", time.monotonic())
        transcriber = getattr(request.app.state, "transcriber", None)
        return {
            "status": "ok",
            "api": settings.app_name,
            "version": settings.app_version,
            "uptime": round(time.monotonic() - started_at, 3),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "transcription_service": transcriber.name if transcriber else None,
        }

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose application metrics for Prometheus scraping."""

        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return _error_response(exc.status_code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": [str(part) for part in error.get("loc", ())], "msg": str(error.get("msg", ""))}
            for error in exc.errors()
        ]
        return _error_response(400, "Invalid request", {"errors": errors})

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(500, "An unexpected error occurred")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
    )
