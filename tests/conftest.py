"""
Global test fixtures for SampleHub.

This module provides shared fixtures for all tests including:
- Mock MongoDB (mongomock-motor)
- Mock Redis (fakeredis)
- Test settings with fast hashing and fixed secrets
- A notifier that records messages instead of delivering them
- Principal factories and an app wired to the mocks
"""

import itertools
import sys
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from samplehub.config import Settings  # noqa: E402
from samplehub.services.notifier import Notifier  # noqa: E402

TEST_PASSWORD = "Secret123"


# =============================================================================
# Settings
# =============================================================================

@pytest.fixture
def test_settings() -> Settings:
    """Settings for tests: cheap bcrypt, distinct secrets, generous rate limit."""
    return Settings(
        environment="test",
        bcrypt_rounds=4,
        jwt_access_token_secret="access-secret",
        jwt_refresh_token_secret="refresh-secret",
        jwt_activation_token_secret="activation-secret",
        jwt_reset_token_secret="reset-secret",
        login_rate_limit_attempts=20,
        notify_webhook_url=None,
    )


@pytest.fixture
def dev_settings(test_settings) -> Settings:
    """Development settings, where permanent deletion is allowed."""
    return test_settings.model_copy(update={"environment": "development"})


# =============================================================================
# MongoDB Fixtures (mongomock-motor)
# =============================================================================

@pytest_asyncio.fixture
async def mock_async_mongo_client():
    """
    Create an async mock MongoDB client using mongomock-motor.
    """
    try:
        from mongomock_motor import AsyncMongoMockClient
        client = AsyncMongoMockClient()
        yield client
        client.close()
    except ImportError:
        pytest.skip("mongomock-motor not installed")


@pytest_asyncio.fixture
async def mock_auth_db(mock_async_mongo_client):
    """Get mock auth_db database."""
    from samplehub.database.databases import auth_db
    return mock_async_mongo_client[auth_db.DB_NAME]


@pytest_asyncio.fixture
async def mock_catalog_db(mock_async_mongo_client):
    """Get mock catalog_db database."""
    from samplehub.database.databases import catalog_db
    return mock_async_mongo_client[catalog_db.DB_NAME]


# =============================================================================
# Redis Fixtures (fakeredis)
# =============================================================================

@pytest_asyncio.fixture
async def mock_async_redis():
    """
    Create an async mock Redis client using fakeredis.

    Each test gets its own server so counters never leak between tests.
    """
    try:
        import fakeredis
        import fakeredis.aioredis
        redis_client = fakeredis.aioredis.FakeRedis(
            server=fakeredis.FakeServer(), decode_responses=True
        )
        yield redis_client
        await redis_client.flushall()
        await redis_client.aclose()
    except ImportError:
        pytest.skip("fakeredis with aioredis not installed")


# =============================================================================
# Notifier
# =============================================================================

class RecordingNotifier(Notifier):
    """Notifier keeping every message in memory."""

    def __init__(self, settings: Settings):
        super().__init__(settings)
        self.sent: list[dict[str, Any]] = []

    def dispatch(self, message: dict[str, Any]) -> None:
        self.sent.append(message)

    def of_channel(self, channel: str) -> list[dict[str, Any]]:
        return [message for message in self.sent if message["channel"] == channel]


@pytest.fixture
def notifier(test_settings) -> RecordingNotifier:
    return RecordingNotifier(test_settings)


# =============================================================================
# Stores and services
# =============================================================================

@pytest.fixture
def token_service(test_settings):
    from samplehub.core.tokens import TokenService
    return TokenService(test_settings)


@pytest.fixture
def user_store(mock_auth_db, test_settings):
    from samplehub.services.credential_store import UserStore
    return UserStore(mock_auth_db, test_settings)


@pytest.fixture
def admin_store(mock_auth_db, test_settings):
    from samplehub.services.credential_store import AdminStore
    return AdminStore(mock_auth_db, test_settings)


@pytest.fixture
def user_sessions(user_store, token_service, mock_async_redis, notifier, test_settings):
    from samplehub.services.session_service import SessionService
    from samplehub.services.token_registry import RefreshTokenRegistry
    return SessionService(
        user_store, token_service, RefreshTokenRegistry(mock_async_redis), notifier, test_settings
    )


@pytest.fixture
def admin_sessions(admin_store, token_service, mock_async_redis, notifier, test_settings):
    from samplehub.services.session_service import SessionService
    from samplehub.services.token_registry import RefreshTokenRegistry
    return SessionService(
        admin_store, token_service, RefreshTokenRegistry(mock_async_redis), notifier, test_settings
    )


# =============================================================================
# Principal factories
# =============================================================================

def _principal_factory(store, prefix: str, default_role: str):
    counter = itertools.count(1)

    async def _create(**overrides):
        n = next(counter)
        status = overrides.pop("status", None)
        data = {
            "name": f"{prefix.title()} {n}",
            "username": f"{prefix}{n}",
            "email": f"{prefix}{n}@example.com",
            "phone": f"98765{n:05d}",
            "password": TEST_PASSWORD,
            "role": default_role,
        }
        data.update(overrides)
        principal = await store.create(**data)
        if status:
            principal.status = status
            await store.save(principal, "status")
        return principal

    return _create


@pytest.fixture
def create_user(user_store):
    """
    Factory creating users with unique identifiers.

        user = await create_user(status="Blocked")
    """
    return _principal_factory(user_store, "user", "User")


@pytest.fixture
def create_admin(admin_store):
    """Factory creating admins; pass role="SuperAdmin" for a super admin."""
    return _principal_factory(admin_store, "admin", "Admin")


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def app(test_settings, mock_async_mongo_client, mock_async_redis, notifier):
    """
    Create the FastAPI app for test settings with datastores and notifier overridden.
    """
    from samplehub.dependencies.providers import (
        get_mongo,
        get_notifier,
        get_redis,
    )
    from samplehub.main import create_app

    application = create_app(test_settings)

    async def _mongo():
        return mock_async_mongo_client

    async def _redis():
        return mock_async_redis

    application.dependency_overrides[get_mongo] = _mongo
    application.dependency_overrides[get_redis] = _redis
    application.dependency_overrides[get_notifier] = lambda: notifier
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(app):
    """
    Create an async test client.

    ASGITransport does not run the lifespan, so no real datastore is touched.
    """
    from httpx import AsyncClient, ASGITransport

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
def login_as(async_client):
    """
    Log a principal in through the API.

    The client keeps the session cookies; the access token is also set as
    the Bearer header, so later requests are authenticated.
    """
    async def _login(principal, family: str = "user", password: str = TEST_PASSWORD) -> str:
        response = await async_client.patch(
            f"/api/v1/{family}/login",
            json={"username": principal.username, "password": password},
        )
        assert response.status_code == 200, response.text
        token = response.json()["results"]["token"]
        async_client.headers["Authorization"] = f"Bearer {token}"
        return token

    return _login
