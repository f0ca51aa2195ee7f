"""Stream Registry - authoritative store of publishable streams.

This package owns the set of configured streams, validates publish/play
attempts against stored keys and expiry windows, tracks which streams are
live, and persists every change atomically to a single state file.

Main Components:
    - StreamStore: Thread-safe registry with authenticate/add/remove/block
    - parse_expiry: Turns an operator expiry expression into an ExpiryResult
    - encode/decode: Snapshot codec for the on-disk state file
    - RegistryConfig: Configuration management

Example:
    >>> from stream_registry import StreamStore, RegistryConfig, parse_expiry
    >>> store = StreamStore(RegistryConfig(state_file="/tmp/state.bin"))
    >>> stream = store.add_stream(
    ...     name="live", application="show", auth_key="secret1", expiry=parse_expiry("")
    ... )
    >>> store.authenticate("show", "live", "secret1")
    (True, '...')
"""

from stream_registry.codec import decode, encode
from stream_registry.config import RegistryConfig
from stream_registry.errors import (
    CorruptStateError,
    NotFoundError,
    PersistenceError,
    RegistryError,
    ValidationError,
)
from stream_registry.expiry import parse_expiry
from stream_registry.models import ExpiryKind, ExpiryResult, Stream
from stream_registry.store import StreamStore

__version__ = "1.0.0"
__all__ = [
    "StreamStore",
    "RegistryConfig",
    "Stream",
    "ExpiryKind",
    "ExpiryResult",
    "parse_expiry",
    "encode",
    "decode",
    "RegistryError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
    "CorruptStateError",
]
