"""
Pressroom Backend: Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the whole suite.
How:   Every test gets its own SQLite database file (aiosqlite) and a fresh app
       from `create_app()`, with in-memory fakes for the external collaborators
       (object storage, SMTP, headless browser).

Fixture Hierarchy:
    test_settings ─┬─ app ── test_client
    fake_storage ──┤
    fake_mailer ───┤
    fake_renderer ─┘
    auth_headers:  signs up + logs in "alice" and returns the Authorization header
    login_as:      same for any other username

ASGITransport does not run the lifespan, so the `app` fixture creates the
tables itself.
"""

import os
import tempfile
from email.message import EmailMessage
from typing import Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any pressroom import: pressroom.main builds a default app at import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./pressroom_test.db"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="pressroom_test_")
os.environ["JWT_SECRET"] = "test-secret-that-is-at-least-32-bytes-long"
os.environ["LOG_LEVEL"] = "WARNING"

from pressroom.config import Settings  # noqa: E402
from pressroom.database import create_all  # noqa: E402
from pressroom.exceptions import NotFoundError, UpstreamServiceError  # noqa: E402
from pressroom.main import create_app  # noqa: E402
from pressroom.services.mail_service import Mailer  # noqa: E402
from pressroom.services.screenshot_service import PageRenderer  # noqa: E402
from pressroom.services.storage_base import ObjectStorage, StoredObject  # noqa: E402

# Smallest valid PNG: signature + IHDR + IDAT + IEND for a 1x1 pixel
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06"
    b"\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01"
    b"\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


# ══════════════════════════════════════════════════════════════════════════
# Collaborator Fakes
# ══════════════════════════════════════════════════════════════════════════

class FakeStorage(ObjectStorage):
    """In-memory object store handing out https://cdn.test/<key> URLs."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.deleted: List[str] = []
        self.fail_uploads = False
        self._counter = 0

    async def upload(self, content: bytes, filename: str, content_type: str) -> StoredObject:
        if self.fail_uploads:
            raise UpstreamServiceError(service="storage", message="Upload rejected by object store")
        self._counter += 1
        key = f"news/{self._counter}-{filename}"
        self.objects[key] = content
        return StoredObject(key=key, url=f"https://cdn.test/{key}")

    async def download(self, key: str) -> bytes:
        if key not in self.objects:
            raise NotFoundError(resource="file", resource_id=key)
        return self.objects[key]

    async def delete(self, key: str) -> None:
        self.deleted.append(key)
        self.objects.pop(key, None)


class FakeMailer(Mailer):
    def __init__(self):
        self.sent: List[EmailMessage] = []
        self.error: Optional[str] = None

    async def send(self, message: EmailMessage) -> None:
        if self.error:
            raise UpstreamServiceError(service="mail", message=self.error)
        self.sent.append(message)


class FakeRenderer(PageRenderer):
    def __init__(self):
        self.urls: List[str] = []

    async def render(self, url: str) -> bytes:
        self.urls.append(url)
        return PNG_BYTES


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        storage_root=str(tmp_path / "storage"),
        public_base_url="http://test",
        jwt_secret="test-secret-that-is-at-least-32-bytes-long",
        bcrypt_rounds=4,
        smtp_username="site@example.com",
        smtp_password="not-a-real-password",
        contact_recipient="owner@example.com",
        max_file_size=1024 * 1024,
        log_level="WARNING",
    )


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def fake_mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest_asyncio.fixture
async def app(test_settings, fake_storage, fake_mailer, fake_renderer):
    application = create_app(
        test_settings,
        storage=fake_storage,
        mailer=fake_mailer,
        renderer=fake_renderer,
    )
    await create_all(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient wired straight into the ASGI app (no server).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def session_factory(app):
    """Direct access to the app's sessions for service-level tests."""
    return app.state.session_factory


async def login_headers(client: AsyncClient, username: str, password: str = "s3cret-pass") -> Dict[str, str]:
    """Sign up (ignoring 409 for existing users), log in, return the auth header."""
    signup = await client.post("/signup", json={"username": username, "password": password})
    assert signup.status_code in (201, 409), signup.text
    login = await client.post("/login", json={"username": username, "password": password})
    assert login.status_code == 200, login.text
    return {"Authorization": f"Bearer {login.json()['token']}"}


@pytest.fixture
def login_as(test_client):
    """`headers = await login_as("bob")` for tests that need a second user."""
    async def _login(username: str, password: str = "s3cret-pass") -> Dict[str, str]:
        return await login_headers(test_client, username, password)
    return _login


@pytest_asyncio.fixture
async def auth_headers(test_client) -> Dict[str, str]:
    return await login_headers(test_client, "alice")


@pytest.fixture
def sample_image_bytes() -> bytes:
    """A 1x1 PNG, small enough for any size limit."""
    return PNG_BYTES


@pytest.fixture
def temp_storage(tmp_path) -> str:
    """Fresh directory for storage backend tests."""
    storage_dir = tmp_path / "media"
    storage_dir.mkdir()
    return str(storage_dir)
