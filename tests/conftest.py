"""Shared test fixtures for Keygate."""

from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from keygate.common.config import KeygateSettings


SECRET_KEY = "test-secret-key-for-unit-tests"
ADMIN_CREDENTIALS = {"username": "admin", "password": "admin123"}
STAFF_CREDENTIALS = {"username": "staff", "password": "staff123"}

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_settings(**overrides) -> KeygateSettings:
    defaults = {
        "db_url": "sqlite+aiosqlite://",
        "secret_key": SECRET_KEY,
        "log_level": "WARNING",
    }
    defaults.update(overrides)
    return KeygateSettings(**defaults)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
async def services(settings):
    """Fully wired service container on a fresh in-memory database."""
    from keygate.deps import build_services

    container = build_services(settings)
    await container.startup()
    yield container
    await container.shutdown()


@pytest.fixture
def now():
    return T0


@pytest.fixture
def app(settings):
    """Create a test app with in-memory DB."""
    from keygate.app import create_app
    return create_app(settings)


@pytest.fixture
async def client(app):
    # ASGITransport doesn't run lifespan, so start the services by hand
    services = app.state.services
    await services.startup()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await services.shutdown()


async def _login(client, credentials) -> dict:
    resp = await client.post("/auth/login", json=credentials)
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
async def admin_headers(client):
    return await _login(client, ADMIN_CREDENTIALS)


@pytest.fixture
async def staff_headers(client):
    return await _login(client, STAFF_CREDENTIALS)
