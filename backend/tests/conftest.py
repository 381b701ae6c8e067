"""
Family Cookbook Backend — Test Configuration (conftest.py)
============================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Each API test gets its own application built by create_app() around a
       fresh SQLite file and upload directory under tmp_path, with the
       lifespan entered so tables exist and the bootstrap admin is seeded.

Fixture Hierarchy:
    Function-scoped:
    ├── test_settings:    Settings pointing at tmp_path, fast bcrypt
    ├── app:              create_app(test_settings) with lifespan running
    ├── client:           HTTPX AsyncClient (anonymous visitor)
    ├── auth_client:      HTTPX AsyncClient logged in as the admin
    ├── mock_db_session:  AsyncMock session for service unit tests
    └── temp_storage:     Empty directory for FileService tests
"""

import os
import tempfile
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any cookbook import: cookbook.main builds a default app at import
_scratch = tempfile.mkdtemp(prefix="cookbook_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_scratch}/default.db"
os.environ["STORAGE_ROOT"] = os.path.join(_scratch, "uploads")
os.environ["STATIC_DIR"] = os.path.join(_scratch, "no-static")
os.environ["SESSION_SECRET"] = "test-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

from cookbook.config import Settings  # noqa: E402
from cookbook.main import create_app  # noqa: E402

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"
ADMIN_NAME = "Grandma Rose"

# Small cap so 413 paths are cheap to exercise
TEST_MAX_FILE_SIZE = 4096


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'cookbook.db'}",
        storage_root=str(tmp_path / "uploads"),
        static_dir=str(tmp_path / "public"),
        max_file_size=TEST_MAX_FILE_SIZE,
        session_secret="test-secret-not-real",
        admin_username=ADMIN_USERNAME,
        admin_password=ADMIN_PASSWORD,
        admin_display_name=ADMIN_NAME,
        bcrypt_rounds=4,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(test_settings):
    """
    A fully started application.

    ASGITransport does not send lifespan events, so the lifespan context is
    entered here directly.
    """
    application = create_app(test_settings)
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Anonymous HTTP client.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest_asyncio.fixture
async def auth_client(client) -> AsyncClient:
    """The same client after logging in as the seeded admin; the cookie jar keeps the session."""
    response = await client.post(
        "/api/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200, response.text
    return client


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_publish(mock_db_session):
            mock_db_session.get.return_value = pending
            result = await pending_service.publish(mock_db_session, ...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)
