"""Stream administration routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from gateway_api.dependencies import get_store, require_admin
from stream_registry.expiry import parse_expiry
from stream_registry.models import Stream
from stream_registry.store import StreamStore

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


class StreamCreate(BaseModel):
    """New stream request."""

    name: str = Field(..., description="Stream name")
    application: str = Field("", description="Application namespace")
    auth_key: str = Field("", description="Shared secret the publisher presents")
    auth_expire: str = Field(
        "", description="Empty for never, ISO-8601 duration (PT12H) or RFC 3339 timestamp"
    )
    notes: str = Field("", description="Operator notes")


class BlockToggle(BaseModel):
    """Block toggle request.

    ``blocked`` is the value the operator last saw; the stream is set to the
    opposite. Omit it to flip whatever is stored.
    """

    blocked: Optional[bool] = None


class StreamOut(BaseModel):
    """Stream as shown to operators."""

    id: str
    application: str
    name: str
    auth_key: str
    auth_expire: Optional[int] = None
    expires_at: Optional[str] = None
    expired: bool = False
    notes: str = ""
    blocked: bool = False
    active: bool = False

    @classmethod
    def from_stream(cls, stream: Stream, now: float) -> "StreamOut":
        return cls(
            **stream.to_dict(),
            expires_at=stream.expires_at(),
            expired=stream.is_expired(now),
        )


@router.get("", response_model=list[StreamOut])
async def list_streams(store: StreamStore = Depends(get_store)):
    """List all streams sorted by name.

    Returns:
        list[StreamOut]: Current streams.
    """
    now = store.now()
    return [StreamOut.from_stream(stream, now) for stream in store.list_streams()]


@router.get("/{stream_id}", response_model=StreamOut)
async def get_stream(stream_id: str, store: StreamStore = Depends(get_store)):
    """Get a single stream by id.

    Raises:
        NotFoundError: If the stream does not exist (404).
    """
    return StreamOut.from_stream(store.get(stream_id), store.now())


@router.post("", response_model=StreamOut, status_code=status.HTTP_201_CREATED)
async def add_stream(stream_data: StreamCreate, store: StreamStore = Depends(get_store)):
    """Add a new stream.

    Args:
        stream_data: Stream fields and expiry expression.
        store: Stream store.

    Returns:
        StreamOut: The created stream with its id.

    Raises:
        HTTPException: If the expiry expression is invalid (422).
        ValidationError: If the record is rejected by the store (422).
        PersistenceError: If the state could not be saved (500).
    """
    expiry = parse_expiry(stream_data.auth_expire)
    if expiry.is_invalid:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"invalid auth expiry: '{stream_data.auth_expire}'",
        )

    stream = store.add_stream(
        name=stream_data.name,
        application=stream_data.application,
        auth_key=stream_data.auth_key,
        expiry=expiry,
        notes=stream_data.notes,
    )
    return StreamOut.from_stream(stream, store.now())


@router.delete("/{stream_id}", response_model=StreamOut)
async def remove_stream(stream_id: str, store: StreamStore = Depends(get_store)):
    """Remove a stream.

    Returns:
        StreamOut: The removed stream.
    """
    return StreamOut.from_stream(store.remove_stream(stream_id), store.now())


@router.post("/{stream_id}/block", response_model=StreamOut)
async def toggle_block(
    stream_id: str,
    toggle: Optional[BlockToggle] = None,
    store: StreamStore = Depends(get_store),
):
    """Block or unblock a stream by flipping its current state.

    Args:
        stream_id: Stream to change.
        toggle: Optional last-seen blocked value.
        store: Stream store.

    Returns:
        StreamOut: The updated stream.
    """
    last = toggle.blocked if toggle else None
    stream = store.toggle_blocked(stream_id, last)
    return StreamOut.from_stream(stream, store.now())
