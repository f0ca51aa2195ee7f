"""Service information and health endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from gateway_api.config import Settings
from gateway_api.dependencies import get_settings, get_store
from stream_registry.store import StreamStore

router = APIRouter()


@router.get("/")
async def root(settings: Settings = Depends(get_settings)):
    """Root endpoint with API information."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "docs_url": "/docs",
        "endpoints": {
            "auth": "/auth",
            "streams": f"{settings.api_prefix}/streams",
        },
    }


@router.get("/health")
async def health_check(
    settings: Settings = Depends(get_settings),
    store: StreamStore = Depends(get_store),
):
    """Health check endpoint."""
    snapshot = store.snapshot()
    return {
        "status": "healthy",
        "service": settings.app_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "streams": len(snapshot),
        "active_streams": sum(1 for stream in snapshot if stream.active),
    }
