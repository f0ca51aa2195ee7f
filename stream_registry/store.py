"""Stream Store - thread-safe registry of configured streams.

All reads and writes go through one lock. Mutations build a new tuple of
records, persist it, and only then swap it in, so a failed write leaves
both memory and disk at the last committed state.
"""

import logging
import secrets
import threading
import time
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from stream_registry.codec import describe, load_state, save_state
from stream_registry.config import RegistryConfig
from stream_registry.errors import NotFoundError, PersistenceError, ValidationError
from stream_registry.models import ExpiryResult, Stream

logger = logging.getLogger(__name__)


class StreamStore:
    """Authoritative registry of streams with durable persistence.

    Features:
    - Authentication of publish/play attempts (key, block flag, expiry)
    - Live/inactive tracking driven by media server callbacks
    - Add/remove/block operations persisted atomically on every change
    - Consistent read-only snapshots for presentation

    Expiry is evaluated lazily: a key simply stops authenticating once the
    clock passes its auth_expire.

    Example:
        >>> config = RegistryConfig(state_file="/tmp/streams.bin")
        >>> store = StreamStore(config)
        >>> stream = store.add_stream(
        ...     name="live", application="show", auth_key="secret1",
        ...     expiry=ExpiryResult.never(),
        ... )
        >>> store.authenticate("show", "live", "secret1")
        (True, '0b6f...')
    """

    def __init__(self, config: RegistryConfig, clock: Callable[[], float] = time.time):
        """Initialize the store and load persisted state.

        Args:
            config: RegistryConfig with the state file location
            clock: Source of the current time in epoch seconds

        Raises:
            ValueError: If configuration is invalid
            CorruptStateError: If the state file exists but cannot be decoded
        """
        config.validate()
        self.config = config
        self._clock = clock
        self._lock = threading.Lock()
        self._path = Path(config.state_file)
        self._closed = False

        if config.create_state_dir:
            self._path.parent.mkdir(parents=True, exist_ok=True)

        # No media session survives a restart
        self._streams: Tuple[Stream, ...] = tuple(
            replace(stream, active=False) if stream.active else stream
            for stream in load_state(self._path)
        )

        logger.info(
            f"StreamStore initialized from {self._path}",
            extra=describe(self._streams),
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._streams)

    @property
    def state_file(self) -> Path:
        return self._path

    def _find_by_name(self, application: str, name: str) -> Optional[Stream]:
        for stream in self._streams:
            if stream.matches(application, name):
                return stream
        return None

    def _index_of(self, stream_id: str) -> int:
        for index, stream in enumerate(self._streams):
            if stream.id == stream_id:
                return index
        raise NotFoundError(stream_id)

    def _new_id(self) -> str:
        """Random UUID4 not held by any live stream.

        Removed ids are not remembered; that they are never handed out again
        relies on the 122 random bits of UUID4.
        """
        existing = {stream.id for stream in self._streams}
        while True:
            stream_id = str(uuid.uuid4())
            if stream_id not in existing:
                return stream_id

    def _commit(self, streams: Tuple[Stream, ...]) -> None:
        """Persist then publish a new state. Caller must hold the lock."""
        if self._closed:
            raise PersistenceError(f"Stream store {self._path} is closed")
        save_state(self._path, streams, fsync=self.config.fsync_writes)
        self._streams = streams

    def authenticate(self, application: str, name: str, token: str) -> Tuple[bool, str]:
        """Check a publish/play attempt.

        The first stream (in insertion order) matching application/name is
        used. The failure reason is logged but never returned.

        Args:
            application: Application the media server reports
            name: Stream name the media server reports
            token: Auth token presented by the client

        Returns:
            Tuple (ok, stream_id). stream_id is "" when no stream matches and
            may be set even when ok is False.
        """
        with self._lock:
            stream = self._find_by_name(application, name)
            now = self._clock()

        if stream is None:
            logger.info(f"Auth failed for {application}/{name}: unknown stream")
            return False, ""

        if stream.blocked:
            reason = "blocked"
        elif not secrets.compare_digest(
            token.encode("utf-8"), stream.auth_key.encode("utf-8")
        ):
            reason = "wrong key"
        elif stream.is_expired(now):
            reason = "expired"
        else:
            return True, stream.id

        logger.info(f"Auth failed for {application}/{name} ({stream.id}): {reason}")
        return False, stream.id

    def set_active(self, stream_id: str) -> None:
        """Mark a stream as live. Unknown ids are ignored."""
        with self._lock:
            try:
                index = self._index_of(stream_id)
            except NotFoundError:
                logger.debug(f"set_active ignored, stream {stream_id} no longer exists")
                return
            streams = list(self._streams)
            streams[index] = replace(streams[index], active=True)
            self._streams = tuple(streams)

    def set_inactive(self, application: str, name: str) -> None:
        """Mark the stream matching application/name as not live."""
        with self._lock:
            for index, stream in enumerate(self._streams):
                if stream.matches(application, name):
                    if stream.active:
                        streams = list(self._streams)
                        streams[index] = replace(stream, active=False)
                        self._streams = tuple(streams)
                    return
            logger.debug(f"set_inactive ignored, no stream {application}/{name}")

    def add_stream(
        self,
        *,
        name: str,
        expiry: ExpiryResult,
        application: str = "",
        auth_key: str = "",
        notes: str = "",
    ) -> Stream:
        """Create and persist a new stream.

        Args:
            name: Stream name (required)
            expiry: Resolved expiry, must not be invalid
            application: Application namespace
            auth_key: Shared secret
            notes: Operator notes

        Returns:
            The stored Stream with its assigned id

        Raises:
            ValidationError: If name is empty, expiry is invalid, or the
                application/name pair is already taken
            PersistenceError: If the state file could not be written or the
                store is closed
        """
        if not name:
            raise ValidationError("stream name must be set")
        if expiry.is_invalid:
            raise ValidationError("invalid auth expiry")

        with self._lock:
            if self._find_by_name(application, name) is not None:
                raise ValidationError(f"stream {application}/{name} already exists")

            stream = Stream(
                id=self._new_id(),
                application=application,
                name=name,
                auth_key=auth_key,
                auth_expire=expiry.to_auth_expire(),
                notes=notes,
            )
            self._commit(self._streams + (stream,))

        logger.info(f"Added stream {stream.id} ({application}/{name})")
        return stream

    def remove_stream(self, stream_id: str) -> Stream:
        """Delete a stream by id.

        Returns:
            The removed record

        Raises:
            NotFoundError: If the id does not exist
            PersistenceError: If the state file could not be written or the
                store is closed
        """
        with self._lock:
            index = self._index_of(stream_id)
            removed = self._streams[index]
            self._commit(self._streams[:index] + self._streams[index + 1 :])

        logger.info(f"Removed stream {stream_id} ({removed.application}/{removed.name})")
        return removed

    def set_blocked(self, stream_id: str, blocked: bool) -> Stream:
        """Set the operator block flag.

        Returns:
            The updated record

        Raises:
            NotFoundError: If the id does not exist
            PersistenceError: If the state file could not be written or the
                store is closed
        """
        return self._update_blocked(stream_id, lambda current: blocked)

    def toggle_blocked(self, stream_id: str, last: Optional[bool] = None) -> Stream:
        """Flip the block flag.

        Args:
            stream_id: Stream to change
            last: Block value the caller last saw; the new value is its
                opposite. When None, the stored value is flipped.

        Returns:
            The updated record
        """
        if last is None:
            return self._update_blocked(stream_id, lambda current: not current)
        return self._update_blocked(stream_id, lambda current: not last)

    def _update_blocked(self, stream_id: str, decide: Callable[[bool], bool]) -> Stream:
        with self._lock:
            index = self._index_of(stream_id)
            current = self._streams[index]
            updated = replace(current, blocked=decide(current.blocked))
            streams = list(self._streams)
            streams[index] = updated
            self._commit(tuple(streams))

        action = "Blocked" if updated.blocked else "Unblocked"
        logger.info(f"{action} stream {stream_id} ({updated.application}/{updated.name})")
        return updated

    def get(self, stream_id: str) -> Stream:
        """Fetch one stream by id.

        Raises:
            NotFoundError: If the id does not exist
        """
        with self._lock:
            return self._streams[self._index_of(stream_id)]

    def snapshot(self) -> Tuple[Stream, ...]:
        """Consistent read-only view of all streams in insertion order."""
        with self._lock:
            return self._streams

    def list_streams(self) -> List[Stream]:
        """All streams sorted by name, ties kept in insertion order."""
        return sorted(self.snapshot(), key=lambda stream: stream.name)

    def now(self) -> float:
        return self._clock()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop accepting changes.

        Every committed change is already on disk, so nothing is flushed.
        Reads and authentication keep working; add/remove/block raise
        PersistenceError afterwards. Calling close twice is harmless.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            summary = describe(self._streams)

        logger.info(f"StreamStore closed ({self._path})", extra=summary)
