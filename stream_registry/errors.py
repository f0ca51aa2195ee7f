"""Exception hierarchy for the stream registry."""

from typing import Optional


class RegistryError(Exception):
    """Base class for all registry errors."""


class ValidationError(RegistryError):
    """Raised when a stream record is missing fields or carries an invalid expiry."""


class NotFoundError(RegistryError):
    """Raised when an operation references a stream id that does not exist."""

    def __init__(self, stream_id: str, message: Optional[str] = None):
        self.stream_id = stream_id
        super().__init__(message or f"Stream not found: {stream_id}")


class PersistenceError(RegistryError):
    """Raised when the durable write of a snapshot fails.

    The mutation that triggered the write has already been rolled back when
    this is raised.
    """


class CorruptStateError(RegistryError):
    """Raised when the state file exists but cannot be decoded."""
