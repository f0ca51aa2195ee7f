"""Tests for application setup and service endpoints."""

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from gateway_api.config import Settings
from gateway_api.main import create_app
from stream_registry.errors import CorruptStateError, PersistenceError
from stream_registry.expiry import parse_expiry


def test_root(client):
    """Test the root endpoint lists the service endpoints."""
    response = client.get("/")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "running"
    assert data["endpoints"]["streams"] == "/api/v1/streams"


def test_service_endpoints_use_app_settings(settings):
    """Test root and health report the settings the app was built with."""
    custom = settings.model_copy(
        update={"app_name": "Studio Gateway", "api_prefix": "/admin", "environment": "staging"}
    )

    with TestClient(create_app(custom)) as client:
        root = client.get("/").json()
        health = client.get("/health").json()

    assert root["service"] == "Studio Gateway"
    assert root["endpoints"]["streams"] == "/admin/streams"
    assert health["service"] == "Studio Gateway"
    assert health["environment"] == "staging"


def test_health(client, store, live_stream):
    """Test health reports stream counts."""
    store.set_active(live_stream.id)

    data = client.get("/health").json()

    assert data["status"] == "healthy"
    assert data["streams"] == 1
    assert data["active_streams"] == 1


def test_shutdown_closes_store(app, store, live_stream):
    """Test the store refuses changes once the app has shut down."""
    with TestClient(app) as client:
        assert client.get("/health").status_code == status.HTTP_200_OK
        assert not store.closed

    assert store.closed
    with pytest.raises(PersistenceError, match="closed"):
        store.add_stream(name="late", expiry=parse_expiry(""))
    assert store.authenticate("show", "live", "secret1") == (True, live_stream.id)


def test_state_loaded_on_startup(settings, live_stream):
    """Test a new app instance sees streams persisted by the previous one."""
    app = create_app(settings)

    assert app.state.store.authenticate("show", "live", "secret1") == (True, live_stream.id)


def test_corrupt_state_aborts_startup(settings, tmp_path):
    """Test an unreadable state file prevents the app from starting."""
    (tmp_path / "state.bin").write_bytes(b"corrupt")

    with pytest.raises(CorruptStateError):
        create_app(settings)


def test_short_admin_token_rejected(tmp_path):
    """Test a weak admin token prevents startup."""
    settings = Settings(_env_file=None, admin_token="short", state_file=str(tmp_path / "s"))

    with pytest.raises(ValueError, match="ADMIN_TOKEN"):
        create_app(settings)


def test_settings_from_env(monkeypatch, tmp_path):
    """Test settings are read from the environment."""
    monkeypatch.setenv("ADMIN_TOKEN", "e" * 32)
    monkeypatch.setenv("STATE_FILE", str(tmp_path / "env.bin"))
    monkeypatch.setenv("PORT", "9090")

    settings = Settings(_env_file=None)

    assert settings.admin_token == "e" * 32
    assert settings.port == 9090
    assert settings.registry_config().state_file == str(tmp_path / "env.bin")
