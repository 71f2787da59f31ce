"""Storage backends for submitted audio recordings."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from app.config.settings import Settings

logger = logging.getLogger(__name__)

_SECONDS_PER_DAY = 24 * 60 * 60
_KEEP_FILES = frozenset({".gitkeep"})


class StorageError(RuntimeError):
    """Raised when audio persistence fails."""


def _checked_filename(filename: str) -> str:
    name = (filename or "").strip()
    if not name or name in {".", ".."} or "/" in name or "\\" in name:
        raise StorageError(f"Invalid audio filename: {filename!r}")
    return name


class AudioStorage(ABC):
    """Persist audio bytes and hand back the URL they are reachable at."""

    name: str = "storage"

    @abstractmethod
    async def store(
        self,
        data: bytes,
        filename: str,
        *,
        content_type: str = "audio/webm",
    ) -> str:
        ...

    @abstractmethod
    async def delete(self, filename: str) -> None:
        ...


class LocalAudioStorage(AudioStorage):
    """Write recordings into a directory served under a public path prefix."""

    name = "local"

    def __init__(self, directory: str | Path, *, public_path: str = "/uploads") -> None:
        self._directory = Path(directory)
        self._public_path = "/" + public_path.strip("/")
        self._directory_ready = False

    @property
    def directory(self) -> Path:
        return self._directory

    def _ensure_directory(self) -> None:
        if self._directory_ready:
            return
        self._directory.mkdir(parents=True, exist_ok=True)
        logger.info("Uploads directory ready: %s", self._directory)
        self._directory_ready = True

    def _write_sync(self, data: bytes, filename: str) -> None:
        self._ensure_directory()
        (self._directory / filename).write_bytes(data)

    async def store(
        self,
        data: bytes,
        filename: str,
        *,
        content_type: str = "audio/webm",
    ) -> str:
        name = _checked_filename(filename)
        try:
            await run_in_threadpool(self._write_sync, data, name)
        except OSError as exc:
            raise StorageError(f"Failed to save audio file {name}: {exc}") from exc

        logger.info("Saved audio file: %s (%d bytes)", name, len(data))
        return f"{self._public_path}/{name}"

    async def delete(self, filename: str) -> None:
        name = _checked_filename(filename)
        try:
            await run_in_threadpool((self._directory / name).unlink, missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete audio file {name}: {exc}") from exc


class S3AudioStorage(AudioStorage):
    """Upload recordings to an S3 bucket under the ``uploads/`` prefix."""

    name = "s3"

    def __init__(self, bucket: str, *, region: str, client: Any) -> None:
        if not bucket:
            raise StorageError("S3 bucket name is not configured.")
        self._bucket = bucket
        self._region = region
        self._client = client

    def _object_key(self, filename: str) -> str:
        return f"uploads/{filename}"

    def _object_url(self, key: str) -> str:
        if self._region == "us-east-1":
            return f"https://{self._bucket}.s3.amazonaws.com/{key}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{key}"

    async def store(
        self,
        data: bytes,
        filename: str,
        *,
        content_type: str = "audio/webm",
    ) -> str:
        key = self._object_key(_checked_filename(filename))
        try:
            await run_in_threadpool(
                self._client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to upload audio file: {exc}") from exc

        logger.info("Uploaded audio file: s3://%s/%s", self._bucket, key)
        return self._object_url(key)

    async def delete(self, filename: str) -> None:
        key = self._object_key(_checked_filename(filename))
        try:
            await run_in_threadpool(
                self._client.delete_object,
                Bucket=self._bucket,
                Key=key,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to delete audio file: {exc}") from exc


def build_audio_storage(settings: Settings) -> AudioStorage:
    """Select the configured storage backend once per process."""

    config = settings.storage
    if config.backend == "s3":
        from app.services.aws import create_boto3_client

        return S3AudioStorage(
            config.bucket_name or "",
            region=config.region,
            client=create_boto3_client("s3", config),
        )
    return LocalAudioStorage(config.uploads_dir, public_path=config.public_path)


@dataclass
class PurgeReport:
    """Outcome of an age-based uploads cleanup run."""

    dry_run: bool
    files: list[str] = field(default_factory=list)
    total_bytes: int = 0

    @property
    def deleted_count(self) -> int:
        return len(self.files)


def purge_expired_uploads(
    directory: str | Path,
    *,
    max_age_days: int = 30,
    dry_run: bool = False,
    now: float | None = None,
) -> PurgeReport:
    """Remove regular files older than ``max_age_days`` from a local uploads dir."""

    uploads = Path(directory).resolve()
    max_age_seconds = max_age_days * _SECONDS_PER_DAY
    current = time.time() if now is None else now
    report = PurgeReport(dry_run=dry_run)

    for path in sorted(uploads.iterdir()):
        if path.name in _KEEP_FILES or not path.is_file():
            continue

        stats = path.stat()
        age = current - stats.st_mtime
        if age <= max_age_seconds:
            continue

        logger.info(
            "Expired upload %s (%d days old, %dKB)",
            path.name,
            int(age // _SECONDS_PER_DAY),
            round(stats.st_size / 1024),
        )
        if not dry_run:
            path.unlink()
        report.files.append(path.name)
        report.total_bytes += stats.st_size

    return report


__all__ = [
    "AudioStorage",
    "LocalAudioStorage",
    "PurgeReport",
    "S3AudioStorage",
    "StorageError",
    "build_audio_storage",
    "purge_expired_uploads",
]
