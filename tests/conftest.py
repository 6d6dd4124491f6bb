"""
Pytest configuration and fixtures for the fan-site API tests
"""

import os
import tempfile
from io import BytesIO
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image

# Ensure test-friendly environment prior to importing the app
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")
os.environ.setdefault("STORAGE_DRIVER", "local")
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="fansite-media-"))
os.environ.setdefault("METRICS_ENABLED", "1")

from app.core.errors import StorageDeleteFailure, StorageWriteFailure  # noqa: E402
from app.db import Database  # noqa: E402
from app.main import create_app  # noqa: E402
from app.services.storage import LocalStorage  # noqa: E402
from app.services.upload_validate import UploadedImage  # noqa: E402

PUBLIC_BASE = "http://testserver/media"


class RecordingStorage(LocalStorage):
    """LocalStorage that records every call and can be told to fail."""

    def __init__(self, base_dir):
        super().__init__(base_dir, PUBLIC_BASE)
        self.puts = []
        self.removes = []
        self.fail_put_after = None
        self.fail_remove = False

    async def _put(self, key, data, content_type):
        if self.fail_put_after is not None and len(self.puts) >= self.fail_put_after:
            raise StorageWriteFailure()
        self.puts.append(key)
        await super()._put(key, data, content_type)

    async def _remove(self, key):
        if self.fail_remove:
            raise StorageDeleteFailure(f"Failed to delete file from storage: {key}")
        self.removes.append(key)
        await super()._remove(key)

    def stored_keys(self, prefix=""):
        """Keys of every object currently on disk, optionally under ``prefix``."""
        return sorted(
            p.relative_to(self.base).as_posix()
            for p in self.base.rglob("*")
            if p.is_file() and not p.name.startswith(".upload-")
            and p.relative_to(self.base).as_posix().startswith(prefix)
        )


def make_png(width=800, height=600, color=(200, 30, 60)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def make_upload(color=(200, 30, 60), name="cover.png") -> UploadedImage:
    return UploadedImage(data=make_png(color=color), content_type="image/png", filename=name)


@pytest.fixture(scope="function")
async def database():
    """Fresh in-memory SQLite database for each test."""
    db = Database("sqlite://:memory:")
    await db.init()
    try:
        yield db
    finally:
        await db.close()


@pytest.fixture
def storage(tmp_path) -> RecordingStorage:
    return RecordingStorage(Path(tmp_path) / "media")


@pytest.fixture
def app(database, storage):
    return create_app(database=database, storage=storage)


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as c:
        yield c


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()
