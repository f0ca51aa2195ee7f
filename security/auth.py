"""
Authentication helpers for the admin API.

Provides:
- Bearer token authentication for admin endpoints
- FastAPI dependency injection support
"""

import secrets
from typing import Optional

from fastapi import HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from security.config import SecurityConfig


class AdminAuthError(HTTPException):
    """Exception raised when admin authentication fails."""

    def __init__(self, detail: str = "Invalid or missing admin token"):
        super().__init__(
            status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"}
        )


# auto_error=False so a missing header yields 401 rather than FastAPI's 403
security_scheme = HTTPBearer(auto_error=False)


def _tokens_match(presented: str, expected: str) -> bool:
    # Use constant-time comparison to prevent timing attacks
    return secrets.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


def require_admin_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security_scheme),
    config: Optional[SecurityConfig] = None,
) -> bool:
    """Validate Bearer token for admin endpoints.

    Args:
        credentials: HTTP Bearer credentials from Authorization header
        config: Security configuration (uses env if not provided)

    Returns:
        True if authentication is successful

    Raises:
        AdminAuthError: If token is missing or invalid
    """
    if config is None:
        config = SecurityConfig.from_env()

    if not credentials:
        raise AdminAuthError("Missing Authorization header")

    if not _tokens_match(credentials.credentials, config.admin_token):
        raise AdminAuthError("Invalid admin token")

    return True

