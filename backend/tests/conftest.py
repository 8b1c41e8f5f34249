"""
Blogdesk Backend: Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   No real database or network: sessions are AsyncMocks, the image host
       is an in-memory fake, and HTTP tests talk to the ASGI app directly.

Fixtures:
    ├── mock_db_session: Mock AsyncSession
    ├── db_result:       Builds the object `await session.execute(...)` returns
    ├── fake_image_host: In-memory ImageHost recording uploads and deletes
    ├── auth_gate:       JWTAuthGate with a test secret
    ├── admin_headers:   Authorization header with a valid access token
    ├── app / client:    App wired with the fakes + httpx AsyncClient
    └── make_category / make_blog: response-shaped objects for route tests
"""

import os
import tempfile
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set before any blogdesk import so the settings singleton picks them up
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["IMAGE_HOST"] = "local"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="blogdesk_test_")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

from blogdesk.database import get_db_session  # noqa: E402
from blogdesk.exceptions import ImageHostError  # noqa: E402
from blogdesk.main import create_app  # noqa: E402
from blogdesk.services.auth_gate import JWTAuthGate  # noqa: E402
from blogdesk.services.image_host_base import ImageHost, UploadedImage  # noqa: E402

TEST_SECRET = "test-secret"


class FakeImageHost(ImageHost):
    """
    In-memory image host.

    `fail_on_upload=n` makes the n-th upload (1-based) raise ImageHostError;
    `fail_on_delete` makes every delete raise.
    """

    def __init__(self, fail_on_upload: Optional[int] = None, fail_on_delete: bool = False):
        super().__init__(folder="blog-images", max_file_size=1024 * 1024)
        self.fail_on_upload = fail_on_upload
        self.fail_on_delete = fail_on_delete
        self.uploaded: List[UploadedImage] = []
        self.deleted: List[str] = []
        self._calls = 0

    async def upload(self, content, filename):
        self.validate_upload(filename, content)
        self._calls += 1
        if self.fail_on_upload == self._calls:
            raise ImageHostError(message="upload failed", context={"filename": filename})
        image = UploadedImage(
            url=f"https://img.test/{self.folder}/{self._calls}-{filename}",
            public_id=f"{self.folder}/{self._calls}-{filename}",
        )
        self.uploaded.append(image)
        return image

    async def delete(self, public_id):
        if self.fail_on_delete:
            raise ImageHostError(message="delete failed", context={"public_id": public_id})
        self.deleted.append(public_id)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value = db_result(scalar=category)
        result = await category_service.get_category(mock_db_session, str(category.id))
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def db_result():
    """
    Factory for the result of `await session.execute(...)`.

    scalar → scalar_one_or_none(); rows → scalars().all(); count → scalar()
    """

    def _make(scalar=None, rows=None, count=None):
        result = MagicMock()
        result.scalar_one_or_none.return_value = scalar
        result.scalars.return_value.all.return_value = rows or []
        result.scalar.return_value = count
        return result

    return _make


@pytest.fixture
def fake_image_host():
    return FakeImageHost()


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def auth_gate():
    return JWTAuthGate(secret=TEST_SECRET, algorithm="HS256", expires_minutes=60)


@pytest.fixture
def admin_id():
    return str(uuid4())


@pytest.fixture
def admin_headers(auth_gate, admin_id):
    token = auth_gate.issue_token(admin_id, "admin@example.com")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def fake_database():
    database = MagicMock()
    database.ping = AsyncMock(return_value="connected")
    database.connect = AsyncMock(return_value=True)
    database.dispose = AsyncMock()
    return database


@pytest.fixture
def app(fake_database, fake_image_host, auth_gate, mock_db_session):
    """App wired with fakes; every request gets `mock_db_session`."""
    application = create_app(
        database=fake_database,
        image_host=fake_image_host,
        auth_gate=auth_gate,
    )

    async def override_session():
        yield mock_db_session

    application.dependency_overrides[get_db_session] = override_session
    return application


@pytest_asyncio.fixture
async def client(app):
    """
    HTTPX AsyncClient talking to the app in-process.

    raise_app_exceptions=False: the catch-all 500 handler's response is
    returned to the test instead of the exception being re-raised.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def make_category():
    def _make(name="Tech News!", description=None):
        now = datetime.now(timezone.utc)
        return SimpleNamespace(
            id=uuid4(),
            name=name,
            slug=name.lower().replace(" ", "-").replace("!", "-"),
            description=description,
            created_at=now,
            updated_at=now,
        )

    return _make


@pytest.fixture
def make_blog(make_category):
    def _make(title="Hello Rust", is_deleted=False, images=None, category=None):
        now = datetime.now(timezone.utc)
        category = category or make_category()
        return SimpleNamespace(
            id=uuid4(),
            title=title,
            description="A short description",
            content="Body text about rust and async",
            author="Ada",
            category_id=category.id,
            category=category,
            images=images or [],
            is_deleted=is_deleted,
            created_at=now,
            updated_at=now,
        )

    return _make
