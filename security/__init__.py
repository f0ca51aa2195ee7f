"""
Security module for the stream gateway.

This module provides:
- Admin API authentication (Bearer token)
- Security configuration management

Usage:
    from security.auth import require_admin_token
    from security.config import SecurityConfig
"""

from security.auth import AdminAuthError, require_admin_token
from security.config import SecurityConfig

__version__ = "1.0.0"
__all__ = [
    "require_admin_token",
    "AdminAuthError",
    "SecurityConfig",
]
