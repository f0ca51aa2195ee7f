"""FastAPI dependencies for settings, the registry and admin authentication."""

from typing import Optional

from fastapi import Request, Security
from fastapi.security import HTTPAuthorizationCredentials

from gateway_api.config import Settings
from security.auth import require_admin_token, security_scheme
from stream_registry.store import StreamStore


def get_settings(request: Request) -> Settings:
    """Get the settings the application was created with.

    Args:
        request: Current request.

    Returns:
        Settings: Application settings.
    """
    return request.app.state.settings


def get_store(request: Request) -> StreamStore:
    """Get the application's stream store.

    Args:
        request: Current request.

    Returns:
        StreamStore: Store created at application startup.
    """
    return request.app.state.store


async def require_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security_scheme),
) -> bool:
    """Check the admin bearer token against the app's security config.

    Raises:
        AdminAuthError: If the token is missing or invalid.
    """
    return require_admin_token(credentials=credentials, config=request.app.state.security)
