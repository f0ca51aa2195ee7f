"""Snapshot codec and crash-safe state file I/O.

File layout (all integers big-endian)::

    magic   4 bytes   b"SRG1"
    version 1 byte    FORMAT_VERSION
    count   4 bytes   number of records
    record  repeated  4-byte length + UTF-8 JSON object

Records are written in insertion order so that equal registries always
encode to equal bytes.
"""

import json
import logging
import os
import struct
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, Tuple, Union

from stream_registry.errors import CorruptStateError, PersistenceError
from stream_registry.models import Stream

logger = logging.getLogger(__name__)

MAGIC = b"SRG1"
FORMAT_VERSION = 1

_HEADER = struct.Struct(">4sBI")
_LENGTH = struct.Struct(">I")

_STRING_FIELDS = ("id", "application", "name", "auth_key", "notes")
_BOOL_FIELDS = ("blocked", "active")
_FIELDS = frozenset(_STRING_FIELDS + _BOOL_FIELDS + ("auth_expire",))


def _encode_record(stream: Stream) -> bytes:
    payload = json.dumps(stream.to_dict(), sort_keys=True, separators=(",", ":"))
    return payload.encode("utf-8")


def _decode_record(raw: bytes, index: int) -> Stream:
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CorruptStateError(f"Record {index} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise CorruptStateError(f"Record {index} is not an object")
    if set(data) != _FIELDS:
        raise CorruptStateError(
            f"Record {index} has fields {sorted(data)}, expected {sorted(_FIELDS)}"
        )

    for field in _STRING_FIELDS:
        if not isinstance(data[field], str):
            raise CorruptStateError(f"Record {index}: {field} must be a string")
    for field in _BOOL_FIELDS:
        if not isinstance(data[field], bool):
            raise CorruptStateError(f"Record {index}: {field} must be a boolean")

    expire = data["auth_expire"]
    # bool is an int subclass; reject it explicitly
    if expire is not None and (isinstance(expire, bool) or not isinstance(expire, int)):
        raise CorruptStateError(f"Record {index}: auth_expire must be an integer or null")

    return Stream(**data)


def encode(streams: Iterable[Stream]) -> bytes:
    """Serialize a registry snapshot.

    Args:
        streams: Stream records in canonical (insertion) order

    Returns:
        Encoded snapshot bytes
    """
    records = [_encode_record(stream) for stream in streams]
    parts = [_HEADER.pack(MAGIC, FORMAT_VERSION, len(records))]
    for record in records:
        parts.append(_LENGTH.pack(len(record)))
        parts.append(record)
    return b"".join(parts)


def decode(data: bytes) -> Tuple[Stream, ...]:
    """Deserialize a registry snapshot.

    Args:
        data: Bytes produced by encode()

    Returns:
        Tuple of Stream records in stored order

    Raises:
        CorruptStateError: If the bytes are not a well-formed snapshot
    """
    if len(data) < _HEADER.size:
        raise CorruptStateError(f"State is truncated ({len(data)} bytes)")

    magic, version, count = _HEADER.unpack_from(data, 0)
    if magic != MAGIC:
        raise CorruptStateError(f"Bad magic {magic!r}")
    if version != FORMAT_VERSION:
        raise CorruptStateError(f"Unsupported format version {version}")

    offset = _HEADER.size
    streams = []
    for index in range(count):
        if offset + _LENGTH.size > len(data):
            raise CorruptStateError(f"Record {index} length is truncated")
        (length,) = _LENGTH.unpack_from(data, offset)
        offset += _LENGTH.size

        end = offset + length
        if end > len(data):
            raise CorruptStateError(f"Record {index} body is truncated")
        streams.append(_decode_record(data[offset:end], index))
        offset = end

    if offset != len(data):
        raise CorruptStateError(f"{len(data) - offset} trailing bytes after last record")

    return tuple(streams)


def write_atomic(path: Union[str, Path], data: bytes, fsync: bool = True) -> None:
    """Write bytes to path so that readers see either the old or the new file.

    The data goes to a temporary file in the same directory, is flushed to
    disk, and is then renamed over the target.

    Args:
        path: Destination file
        data: File contents
        fsync: Flush file and directory to stable storage

    Raises:
        OSError: If writing or renaming fails; the previous file is left
            untouched. Errors while flushing the directory after the rename
            are only logged.
    """
    target = Path(path)
    fd, tmp_name = tempfile.mkstemp(
        dir=target.parent, prefix=f".{target.name}-", suffix=".tmp"
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            if fsync:
                os.fsync(handle.fileno())
        os.replace(tmp_path, target)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    # The new file is in place; a failed directory flush must not be reported
    # as a failed write.
    if fsync and hasattr(os, "O_DIRECTORY"):
        try:
            dir_fd = os.open(target.parent, os.O_RDONLY | os.O_DIRECTORY)
            try:
                os.fsync(dir_fd)
            finally:
                os.close(dir_fd)
        except OSError as exc:
            logger.warning(f"Directory fsync failed for {target.parent}: {exc}")


def save_state(path: Union[str, Path], streams: Iterable[Stream], fsync: bool = True) -> None:
    """Encode and durably write a snapshot.

    Raises:
        PersistenceError: If the write fails
    """
    data = encode(streams)
    try:
        write_atomic(path, data, fsync=fsync)
    except OSError as exc:
        logger.error(f"Failed to write state file {path}: {exc}")
        raise PersistenceError(f"Failed to write state file {path}: {exc}") from exc
    logger.debug(f"State written: {path} ({len(data)} bytes)")


def load_state(path: Union[str, Path]) -> Tuple[Stream, ...]:
    """Read a snapshot from disk.

    Args:
        path: State file location

    Returns:
        Stored records, or an empty tuple if the file does not exist

    Raises:
        CorruptStateError: If the file exists but cannot be decoded
    """
    state_path = Path(path)
    try:
        data = state_path.read_bytes()
    except FileNotFoundError:
        logger.info(f"No state file at {state_path}, starting empty")
        return ()
    return decode(data)


def describe(streams: Iterable[Stream]) -> Dict[str, Any]:
    """Summary of a snapshot for log lines."""
    items = list(streams)
    return {
        "streams": len(items),
        "blocked": sum(1 for s in items if s.blocked),
        "active": sum(1 for s in items if s.active),
    }
