"""Unit tests for stream_registry.config."""

import pytest

from stream_registry.config import RegistryConfig


class TestRegistryConfig:
    """Tests for RegistryConfig class."""

    def test_default_values(self):
        """Test default configuration values."""
        config = RegistryConfig()

        assert config.state_file == "/var/lib/stream-gateway/state.bin"
        assert config.create_state_dir is True
        assert config.fsync_writes is True

    def test_from_env(self, monkeypatch):
        """Test configuration from environment variables."""
        monkeypatch.setenv("STATE_FILE", "/tmp/streams.bin")
        monkeypatch.setenv("CREATE_STATE_DIR", "false")
        monkeypatch.setenv("FSYNC_WRITES", "FALSE")

        config = RegistryConfig.from_env()

        assert config.state_file == "/tmp/streams.bin"
        assert config.create_state_dir is False
        assert config.fsync_writes is False

    def test_from_env_defaults(self, monkeypatch):
        """Test defaults when environment is empty."""
        monkeypatch.delenv("STATE_FILE", raising=False)
        monkeypatch.delenv("FSYNC_WRITES", raising=False)

        config = RegistryConfig.from_env()

        assert config.state_file == "/var/lib/stream-gateway/state.bin"
        assert config.fsync_writes is True

    def test_validate_valid_config(self):
        """Test validation with valid configuration."""
        RegistryConfig(state_file="/tmp/state.bin").validate()  # Should not raise

    def test_validate_empty_path(self):
        """Test validation fails with an empty path."""
        with pytest.raises(ValueError, match="state_file cannot be empty"):
            RegistryConfig(state_file="").validate()

    def test_validate_directory_path(self):
        """Test validation fails when the path is a directory."""
        with pytest.raises(ValueError, match="must be a file path"):
            RegistryConfig(state_file="/tmp/").validate()
