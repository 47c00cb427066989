"""
Test configuration and fixtures.
Remote storage and email are replaced by in-memory fakes.
"""
import os

# Set test environment before any imports
os.environ["ENVIRONMENT"] = "test"
os.environ["EXPOSE_ERROR_DETAILS"] = "false"

import io
import time
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, List, Optional

import pytest
from httpx import AsyncClient, ASGITransport
from starlette.datastructures import Headers, UploadFile

from app.errors import NotificationError, StorageError
from app.services.notification_service import Notifier
from app.services.upload_service import UploadService
from app.storage.base import Folder, StorageClient, StoredBlob


class FakeStorage(StorageClient):
    """In-memory storage that records every call and can fail the n-th write."""

    def __init__(self, fail_on_write: Optional[int] = None, write_delay: float = 0.0):
        self.folders = {}
        self.calls: List[tuple] = []
        self.writes: List[dict] = []
        self.fail_on_write = fail_on_write
        self.fail_lookup = False
        self.write_delay = write_delay

    def find_folder(self, name):
        self.calls.append(("find_folder", name))
        if self.fail_lookup:
            raise StorageError("lookup refused")
        return self.folders.get(name)

    def create_folder(self, name):
        self.calls.append(("create_folder", name))
        folder = Folder(id=f"folder-{len(self.folders) + 1}", name=name)
        self.folders[name] = folder
        return folder

    def write_file(self, name, parent_id, mime_type, data):
        self.calls.append(("write_file", name))
        if self.write_delay:
            time.sleep(self.write_delay)
        if self.fail_on_write is not None and len(self.write_calls) == self.fail_on_write:
            raise StorageError("quota exceeded")
        self.writes.append({"name": name, "parent_id": parent_id, "mime_type": mime_type, "data": data})
        file_id = f"file-{len(self.writes)}"
        return StoredBlob(id=file_id, name=name, link=f"https://drive.example/{file_id}")

    def folder_link(self, folder_id):
        return f"https://drive.example/folders/{folder_id}"

    @property
    def write_calls(self):
        return [c for c in self.calls if c[0] == "write_file"]


class FakeNotifier(Notifier):
    """Collects sent messages; can be unconfigured or failing."""

    def __init__(self, configured: bool = True, error: Optional[Exception] = None):
        self.configured = configured
        self.error = error
        self.sent: List[tuple] = []
        self.attempts = 0

    @property
    def recipient(self):
        return "owner@example.com"

    def is_configured(self):
        return self.configured

    def send(self, recipient, subject, html_body):
        self.attempts += 1
        if self.error is not None:
            raise self.error
        self.sent.append((recipient, subject, html_body))


class StepClock:
    """Clock that advances one millisecond per reading."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(milliseconds=1)
        return value


START = datetime(2024, 6, 1, 14, 30, tzinfo=timezone.utc)


def make_upload(data: bytes, filename: str, content_type: str) -> UploadFile:
    """Build an UploadFile as the multipart parser would."""
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def clock() -> StepClock:
    return StepClock(START)


@pytest.fixture
def service(storage: FakeStorage, notifier: FakeNotifier, clock: StepClock) -> UploadService:
    return UploadService(storage, notifier, clock=clock)


@pytest.fixture(scope="function")
async def client(service: UploadService) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client with the upload service overridden."""
    from app.main import app
    from app.api.uploads import get_upload_service

    app.dependency_overrides[get_upload_service] = lambda: service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    # Clean up overrides
    app.dependency_overrides.clear()


@pytest.fixture
def failing_notifier() -> FakeNotifier:
    return FakeNotifier(error=NotificationError("smtp down"))
