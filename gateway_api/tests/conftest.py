"""Pytest configuration and fixtures for gateway_api tests."""

import pytest
from fastapi.testclient import TestClient

from gateway_api.config import Settings
from gateway_api.main import create_app
from stream_registry.expiry import parse_expiry

ADMIN_TOKEN = "test-admin-token-0123456789abcdef"


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment and .env files."""
    return Settings(
        _env_file=None,
        admin_token=ADMIN_TOKEN,
        state_file=str(tmp_path / "state.bin"),
        fsync_writes=False,
        environment="test",
    )


@pytest.fixture
def app(settings):
    """Application with a fresh store."""
    return create_app(settings)


@pytest.fixture
def store(app):
    """The store the application serves."""
    return app.state.store


@pytest.fixture
def client(app):
    """Test client running the app lifespan."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    """Admin authorization headers."""
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def live_stream(store):
    """A never-expiring stream show/live with key secret1."""
    return store.add_stream(
        name="live", application="show", auth_key="secret1", expiry=parse_expiry("")
    )
