"""
Pytest configuration and shared fixtures for cross-package tests
"""

import pytest

from gateway_api.config import Settings

ADMIN_TOKEN = "integration-admin-token-0123456789"


@pytest.fixture
def gateway_settings(tmp_path):
    """Gateway settings with state in a temporary directory."""
    return Settings(
        _env_file=None,
        admin_token=ADMIN_TOKEN,
        state_file=str(tmp_path / "gateway" / "state.bin"),
        environment="test",
    )


@pytest.fixture
def admin_headers():
    """Admin authorization headers."""
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}
