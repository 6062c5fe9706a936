"""Pytest configuration and fixtures for API tests."""

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from larder.settings import AppSettings
from larder_api.dependencies import build_services
from larder_api.main import create_app


@pytest.fixture
def app():
    return create_app()


@pytest_asyncio.fixture
async def api(app, database, gateway, notifier):
    """HTTP client against the real service graph on the test database.

    The lifespan is not run; state is wired by hand.
    """
    app.state.database = database
    app.state.services = build_services(database, AppSettings(), gateway=gateway, notifier=notifier)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def test_client(app):
    """Synchronous client for tests that stub the services out."""
    client = TestClient(app, raise_server_exceptions=False)
    yield client
    app.dependency_overrides.clear()
