"""Configuration management for the stream registry.

This module handles configuration loading from environment variables
and provides validated configuration objects.
"""

import os
from dataclasses import dataclass


@dataclass
class RegistryConfig:
    """Configuration for the stream registry.

    Attributes:
        state_file: Path of the persisted registry snapshot
        create_state_dir: Create the state file's directory if missing
        fsync_writes: Flush every snapshot to stable storage before returning
    """

    state_file: str = "/var/lib/stream-gateway/state.bin"
    create_state_dir: bool = True
    fsync_writes: bool = True

    @classmethod
    def from_env(cls) -> "RegistryConfig":
        """Create configuration from environment variables.

        Environment variables:
            STATE_FILE: Registry snapshot path (default: /var/lib/stream-gateway/state.bin)
            CREATE_STATE_DIR: Create missing state directory (default: true)
            FSYNC_WRITES: fsync every snapshot (default: true)

        Returns:
            RegistryConfig instance with values from environment
        """
        return cls(
            state_file=os.getenv("STATE_FILE", "/var/lib/stream-gateway/state.bin"),
            create_state_dir=os.getenv("CREATE_STATE_DIR", "true").lower() == "true",
            fsync_writes=os.getenv("FSYNC_WRITES", "true").lower() == "true",
        )

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If configuration is invalid
        """
        if not self.state_file:
            raise ValueError("state_file cannot be empty")
        if self.state_file.endswith(("/", os.sep)):
            raise ValueError(f"state_file must be a file path, got {self.state_file}")
