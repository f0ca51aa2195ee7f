"""Main FastAPI application for the stream gateway."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gateway_api.config import Settings
from gateway_api.middleware.error_handler import setup_exception_handlers
from gateway_api.routes import service, streams, webhook
from logging_module import setup_logging
from stream_registry.store import StreamStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown.

    Args:
        app: FastAPI application instance.
    """
    store: StreamStore = app.state.store
    logger.info(f"Stream gateway ready, {len(store)} streams loaded from {store.state_file}")
    try:
        yield
    finally:
        logger.info("Shutting down stream gateway...")
        store.close()


def create_app(settings: Settings, store: Optional[StreamStore] = None) -> FastAPI:
    """Build the application around an explicit store.

    Args:
        settings: Application settings.
        store: Stream store to serve; loaded from settings.state_file if omitted.

    Returns:
        FastAPI: Configured application.

    Raises:
        CorruptStateError: If the state file exists but cannot be decoded.
        ValueError: If the security configuration is invalid.
    """
    security = settings.security_config()
    security.validate()

    if store is None:
        store = StreamStore(settings.registry_config())

    app = FastAPI(
        title=settings.app_name,
        description="Publish/play authorization for nginx-rtmp, SRS and srtrelay",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.security = security
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(service.router, tags=["Service"])
    app.include_router(webhook.router, tags=["Media Server Callbacks"])
    app.include_router(
        streams.router, prefix=f"{settings.api_prefix}/streams", tags=["Stream Administration"]
    )

    return app


def app_factory() -> FastAPI:
    """Factory for uvicorn: settings and logging from the environment."""
    settings = Settings()
    setup_logging(settings.logging_config())
    return create_app(settings)


def run() -> None:
    """Start the gateway with uvicorn using settings from the environment."""
    import uvicorn

    settings = Settings()
    uvicorn.run(
        "gateway_api.main:app_factory",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
