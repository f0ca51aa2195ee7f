"""Pytest configuration and fixtures for stream_registry tests."""

import os
import stat
from unittest.mock import patch

import pytest

from stream_registry.config import RegistryConfig
from stream_registry.models import Stream
from stream_registry.store import StreamStore


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def registry_config(tmp_path):
    """Registry configuration pointing into a temporary directory."""
    return RegistryConfig(state_file=str(tmp_path / "state" / "streams.bin"))


@pytest.fixture
def store(registry_config, clock):
    """Empty stream store driven by the fake clock."""
    return StreamStore(registry_config, clock=clock)


@pytest.fixture
def sample_streams():
    """A mix of streams covering every field variant."""
    return (
        Stream(
            id="8d0f6c2e-0000-4000-8000-000000000001",
            application="show",
            name="live",
            auth_key="secret1",
            auth_expire=None,
            notes="main studio",
        ),
        Stream(
            id="8d0f6c2e-0000-4000-8000-000000000002",
            application="show",
            name="backup",
            auth_key="secret2",
            auth_expire=1_800_000_000,
            blocked=True,
        ),
        Stream(
            id="8d0f6c2e-0000-4000-8000-000000000003",
            application="",
            name="käse 🧀",
            auth_key="",
            auth_expire=-1,
            notes="line one\nline two",
            active=True,
        ),
    )


@pytest.fixture
def failing_directory_fsync():
    """Make os.fsync fail for directory descriptors only."""
    real_fsync = os.fsync

    def fsync(fd):
        if stat.S_ISDIR(os.fstat(fd).st_mode):
            raise OSError(5, "Input/output error")
        real_fsync(fd)

    with patch("stream_registry.codec.os.fsync", side_effect=fsync) as mock_fsync:
        yield mock_fsync
