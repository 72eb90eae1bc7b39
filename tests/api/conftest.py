"""
Shared fixtures for API tests.

Each test gets its own staging and output directories, and a fake
composer in place of ffmpeg.
"""

import asyncio
from pathlib import Path
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from docvid import settings
from docvid.api.dependencies import get_composer
from docvid.api.main import create_app
from docvid.media.composer import CompositionJob
from docvid.media.exceptions import MediaProcessingError

FAKE_MP4 = b"\x00\x00\x00\x18ftypmp42fake video payload"


class FakeComposer:
    """Stands in for VideoComposer; records jobs and writes a dummy output."""

    def __init__(self, error: Optional[MediaProcessingError] = None, delay: float = 0.0):
        self.error = error
        self.delay = delay
        self.jobs: List[CompositionJob] = []

    async def compose_async(self, job: CompositionJob) -> Path:
        self.jobs.append(job)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        job.output_path.parent.mkdir(parents=True, exist_ok=True)
        job.output_path.write_bytes(FAKE_MP4)
        return job.output_path


@pytest.fixture
def storage_dirs(tmp_path: Path, monkeypatch):
    """Point uploads/processed at isolated directories."""
    uploads = tmp_path / "uploads"
    processed = tmp_path / "processed"
    monkeypatch.setenv("DOCVID_STORAGE_UPLOADS_DIR", str(uploads))
    monkeypatch.setenv("DOCVID_STORAGE_PROCESSED_DIR", str(processed))
    settings.reload()
    yield uploads, processed
    monkeypatch.undo()
    settings.reload()


@pytest.fixture
def uploads_dir(storage_dirs) -> Path:
    return storage_dirs[0]


@pytest.fixture
def processed_dir(storage_dirs) -> Path:
    return storage_dirs[1]


@pytest.fixture
def fake_composer() -> FakeComposer:
    return FakeComposer()


@pytest.fixture
def app(storage_dirs, fake_composer):
    """App wired to the isolated directories and the fake composer."""
    application = create_app()
    application.dependency_overrides[get_composer] = lambda: fake_composer
    return application


@pytest.fixture
def api_client(app):
    return TestClient(app)


@pytest.fixture
def composer_factory():
    """Build extra fake composers (failing, slow) inside a test."""
    return FakeComposer


@pytest.fixture
def fake_mp4() -> bytes:
    return FAKE_MP4
