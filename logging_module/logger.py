"""Logger setup - console and rotating JSON file output.

Services call setup_logging() once at startup; modules then log through
``logging.getLogger(__name__)`` as usual.
"""

import json
import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Optional

from logging_module.config import LoggingConfig

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Attributes every LogRecord carries; anything else came in through extra=
_RESERVED_ATTRS = frozenset(
    [
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
        "asctime",
    ]
)


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """Configure the root logger for the service.

    Replaces any handlers already installed on the root logger, so calling
    it twice does not duplicate output.

    Args:
        config: LoggingConfig (default: LoggingConfig.from_env())

    Returns:
        The configured root logger

    Raises:
        ValueError: If configuration is invalid
    """
    if config is None:
        config = LoggingConfig.from_env()
    config.validate()

    level = getattr(logging, config.log_level)
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    if config.json_console:
        console_handler.setFormatter(JsonFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root.addHandler(console_handler)

    if config.log_path:
        try:
            os.makedirs(config.log_path, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(config.log_path, config.log_file_name),
                maxBytes=config.log_file_max_bytes,
                backupCount=config.log_file_backup_count,
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(JsonFormatter())
            root.addHandler(file_handler)
        except OSError as e:
            root.warning(f"Could not set up file logging in {config.log_path}: {e}")

    return root


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging.

    Formats log records as JSON with timestamp, level, message, and extra fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted string
        """
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)
