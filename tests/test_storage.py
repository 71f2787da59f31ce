"""Local audio storage and the uploads cleanup routine."""

from __future__ import annotations

import os
import time

import pytest

from app.services.storage import (
    LocalAudioStorage,
    S3AudioStorage,
    StorageError,
    purge_expired_uploads,
)

DAY = 24 * 60 * 60


async def test_store_creates_directory_and_returns_public_url(tmp_path):
    storage = LocalAudioStorage(tmp_path / "uploads")

    url = await storage.store(b"abc", "clip.webm")

    assert url == "/uploads/clip.webm"
    assert (tmp_path / "uploads" / "clip.webm").read_bytes() == b"abc"

    await storage.delete("clip.webm")
    assert not (tmp_path / "uploads" / "clip.webm").exists()


async def test_path_traversal_is_rejected(tmp_path):
    storage = LocalAudioStorage(tmp_path / "uploads")

    with pytest.raises(StorageError):
        await storage.store(b"abc", "../escape.webm")


def _touch(path, age_days, now, size=10):
    path.write_bytes(b"0" * size)
    mtime = now - age_days * DAY
    os.utime(path, (mtime, mtime))


@pytest.fixture
def uploads(tmp_path):
    now = time.time()
    directory = tmp_path / "uploads"
    directory.mkdir()
    _touch(directory / "old.webm", 45, now, size=2048)
    _touch(directory / "fresh.webm", 2, now)
    _touch(directory / ".gitkeep", 400, now, size=0)
    (directory / "nested").mkdir()
    return directory, now


def test_purge_dry_run_keeps_files(uploads):
    directory, now = uploads

    report = purge_expired_uploads(directory, max_age_days=30, dry_run=True, now=now)

    assert report.files == ["old.webm"]
    assert report.total_bytes == 2048
    assert (directory / "old.webm").exists()


def test_purge_deletes_only_expired_regular_files(uploads):
    directory, now = uploads

    report = purge_expired_uploads(directory, max_age_days=30, now=now)

    assert report.deleted_count == 1
    assert not (directory / "old.webm").exists()
    assert (directory / "fresh.webm").exists()
    assert (directory / ".gitkeep").exists()
    assert (directory / "nested").is_dir()


class FakeS3Client:
    def __init__(self):
        self.objects: dict[str, dict] = {}

    def put_object(self, **kwargs):
        self.objects[kwargs["Key"]] = kwargs

    def delete_object(self, *, Bucket, Key):
        self.objects.pop(Key, None)


async def test_s3_storage_uploads_under_prefix():
    client = FakeS3Client()
    storage = S3AudioStorage("echo-audio", region="eu-west-1", client=client)

    url = await storage.store(b"abc", "clip.webm", content_type="audio/webm")

    assert url == "https://echo-audio.s3.eu-west-1.amazonaws.com/uploads/clip.webm"
    assert client.objects["uploads/clip.webm"]["ContentType"] == "audio/webm"

    await storage.delete("clip.webm")
    assert client.objects == {}


def test_s3_storage_requires_bucket():
    with pytest.raises(StorageError):
        S3AudioStorage("", region="us-east-1", client=FakeS3Client())
