"""Configuration management for the logging module.

This module handles configuration loading from environment variables
and provides validated configuration objects.
"""

import os
from dataclasses import dataclass

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class LoggingConfig:
    """Configuration for service logging.

    All settings can be overridden via environment variables.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_path: Directory for JSON log files, empty to log to stdout only
        log_file_name: Name of the rotating log file inside log_path
        log_file_max_bytes: Maximum size of log file before rotation
        log_file_backup_count: Number of backup log files to keep
        json_console: Emit JSON lines on stdout instead of plain text
    """

    log_level: str = "INFO"
    log_path: str = ""
    log_file_name: str = "stream_gateway.log"
    log_file_max_bytes: int = 10 * 1024 * 1024  # 10 MB
    log_file_backup_count: int = 5
    json_console: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """Create configuration from environment variables.

        Environment variables:
            LOG_LEVEL: Logging level (default: INFO)
            LOG_PATH: Log file directory (default: none, stdout only)
            LOG_FILE_MAX_BYTES: Max log file size (default: 10MB)
            LOG_FILE_BACKUP_COUNT: Number of backup files (default: 5)
            LOG_JSON_CONSOLE: JSON lines on stdout (default: false)

        Returns:
            LoggingConfig instance with values from environment
        """
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_path=os.getenv("LOG_PATH", ""),
            log_file_max_bytes=int(os.getenv("LOG_FILE_MAX_BYTES", str(10 * 1024 * 1024))),
            log_file_backup_count=int(os.getenv("LOG_FILE_BACKUP_COUNT", "5")),
            json_console=os.getenv("LOG_JSON_CONSOLE", "false").lower() == "true",
        )

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If configuration is invalid
        """
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. Must be one of {VALID_LOG_LEVELS}"
            )

        if self.log_file_max_bytes < 1024:  # At least 1 KB
            raise ValueError(
                f"log_file_max_bytes must be >= 1024, got {self.log_file_max_bytes}"
            )

        if self.log_file_backup_count < 1:
            raise ValueError(
                f"log_file_backup_count must be >= 1, got {self.log_file_backup_count}"
            )

        if not self.log_file_name:
            raise ValueError("log_file_name cannot be empty")
