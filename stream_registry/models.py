"""Data types for the stream registry."""

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ExpiryKind(str, Enum):
    """Outcome categories of an expiry expression."""

    NEVER = "never"
    AT = "at"
    INVALID = "invalid"


@dataclass(frozen=True)
class ExpiryResult:
    """Result of parsing an expiry expression.

    Attributes:
        kind: NEVER, AT or INVALID
        instant: Epoch seconds when kind is AT, otherwise None
    """

    kind: ExpiryKind
    instant: Optional[int] = None

    @classmethod
    def never(cls) -> "ExpiryResult":
        return cls(ExpiryKind.NEVER)

    @classmethod
    def at(cls, instant: int) -> "ExpiryResult":
        return cls(ExpiryKind.AT, int(instant))

    @classmethod
    def invalid(cls) -> "ExpiryResult":
        return cls(ExpiryKind.INVALID)

    @property
    def is_invalid(self) -> bool:
        return self.kind is ExpiryKind.INVALID

    def to_auth_expire(self) -> Optional[int]:
        """Convert to the value stored on a Stream.

        Returns:
            Epoch seconds, or None for "never expires"

        Raises:
            ValueError: If the result is INVALID
        """
        if self.kind is ExpiryKind.INVALID:
            raise ValueError("Invalid expiry cannot be stored on a stream")
        return self.instant


@dataclass(frozen=True)
class Stream:
    """A configured, addressable media endpoint.

    Records are immutable; the store replaces a record to change it.

    Attributes:
        id: Opaque unique identifier (UUID4 string)
        application: Media server application namespace (e.g. "live")
        name: Stream name within the application
        auth_key: Shared secret the publisher must present
        auth_expire: Epoch seconds after which the key is rejected, None = never
        notes: Free-form operator text
        blocked: Operator flag, authentication always fails while set
        active: True while the media server reports the stream as publishing
    """

    id: str
    application: str
    name: str
    auth_key: str
    auth_expire: Optional[int] = None
    notes: str = ""
    blocked: bool = False
    active: bool = False

    def is_expired(self, now: float) -> bool:
        """Check whether the key is past its expiry at the given time."""
        return self.auth_expire is not None and self.auth_expire < now

    def matches(self, application: str, name: str) -> bool:
        return self.application == application and self.name == name

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def expires_at(self) -> Optional[str]:
        """ISO-8601 rendering of auth_expire (UTC), None if it never expires.

        Instants outside the datetime range (possible in state files written
        by other tools) are rendered as raw epoch seconds.
        """
        if self.auth_expire is None:
            return None
        try:
            return datetime.fromtimestamp(self.auth_expire, tz=timezone.utc).isoformat()
        except (OverflowError, OSError, ValueError):
            return str(self.auth_expire)
