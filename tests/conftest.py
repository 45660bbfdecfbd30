"""Pytest configuration and fixtures."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.core.settings import Settings
from src.main import create_app
from src.models.account import Role

TEST_PASSWORD = "Passw0rd"


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at a throwaway SQLite file and upload directory."""
    return Settings(
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'marketplace_test.db'}",
        auto_create_schema=True,
        password_hash_rounds=4,
        upload_dir=str(tmp_path / "uploads"),
        store_timeout_seconds=10.0,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(test_settings):
    """Application with its schema created."""
    application = create_app(test_settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.disconnect()


@pytest_asyncio.fixture
async def client(app):
    """HTTP client bound to the test application."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def second_client(app):
    """Independent client with its own cookie jar."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def store(app):
    return app.state.store


@pytest.fixture
def audit_logger(app):
    return app.state.audit_logger


@pytest.fixture
def session_issuer(app):
    return app.state.session_issuer


@pytest.fixture
def account_service(app):
    return app.state.account_service


@pytest.fixture
def track_service(app):
    return app.state.track_service


@pytest_asyncio.fixture
async def artist(account_service):
    """Registered artist account."""
    return await account_service.register("artist_one", TEST_PASSWORD, Role.ARTIST)


@pytest_asyncio.fixture
async def fan(account_service):
    """Registered fan account."""
    return await account_service.register("fan_one", TEST_PASSWORD, Role.FAN)


@pytest_asyncio.fixture
async def admin(account_service):
    """Registered admin account."""
    return await account_service.register("admin_one", TEST_PASSWORD, Role.ADMIN)


@pytest_asyncio.fixture
async def make_track(store, artist, app):
    """Factory creating a track with real stored content."""
    storage = app.state.track_service.storage

    async def _make_track(title="Test Song", release_type="Single", data=b"ID3-audio-bytes"):
        content_ref = await storage.store(data, f"{title}.mp3")
        return await store.create_track(
            artist_id=artist.id,
            title=title,
            release_type=release_type,
            genre="Pop",
            content_ref=content_ref,
        )

    return _make_track
