"""Shared test fixtures and configuration for backend tests."""
import uuid
from pathlib import Path
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from award_uploads.config import AppSettings, UploadSettings, set_config
from award_uploads.main import app
from award_uploads.uploads.capability import get_remote_capability, set_remote_capability
from award_uploads.uploads.registry import FileRegistry
from award_uploads.uploads.schemas import StagedFile


@pytest.fixture(autouse=True)
def clean_upload_state():
    """Fresh registry and no remote capability for every test."""
    original = get_remote_capability()
    FileRegistry.reset_instance()
    set_remote_capability(None)
    yield
    FileRegistry.reset_instance()
    set_remote_capability(original)


@pytest.fixture
def upload_settings(tmp_path) -> UploadSettings:
    """Upload settings rooted in a temp directory."""
    return UploadSettings(
        upload_path=str(tmp_path / "uploads"),
        staging_dir=str(tmp_path / "staging"),
    )


@pytest.fixture
def app_config(upload_settings):
    """Install temp-dir settings as the process-wide config."""
    config = AppSettings(uploads=upload_settings)
    set_config(config)
    yield config
    set_config(None)


@pytest.fixture
def api_client(app_config):
    """Provide a TestClient for the main FastAPI app.

    The lifespan hook is not run, so no remote capability gets registered
    from config behind the test's back.
    """
    return TestClient(app)


@pytest.fixture
def make_staged(upload_settings) -> Callable[..., StagedFile]:
    """Write bytes into the staging directory and describe them."""
    def _make(
        original_filename: str = "medal.png",
        content: bytes = b"\x89PNG fake image",
        mime_type: str = "image/png",
    ) -> StagedFile:
        staging_dir = Path(upload_settings.staging_dir)
        staging_dir.mkdir(parents=True, exist_ok=True)
        extension = Path(original_filename).suffix
        filename = f"award-{uuid.uuid4()}{extension}"
        path = staging_dir / filename
        path.write_bytes(content)
        return StagedFile(
            original_filename=original_filename,
            filename=filename,
            extension=extension,
            mime_type=mime_type,
            size_bytes=len(content),
            destination=str(staging_dir),
            path=str(path),
        )

    return _make
