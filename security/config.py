"""
Security configuration for the stream gateway.

This module handles security-related configuration settings including:
- Admin API token
- Minimum token strength
"""

import os
from dataclasses import dataclass

MIN_ADMIN_TOKEN_LENGTH = 32


@dataclass
class SecurityConfig:
    """Security configuration for the admin surface.

    Attributes:
        admin_token: Bearer token required by the admin API
    """

    admin_token: str

    @classmethod
    def from_env(cls) -> "SecurityConfig":
        """Load security configuration from environment variables.

        Returns:
            SecurityConfig instance populated from environment

        Raises:
            ValueError: If required environment variables are missing
        """
        admin_token = os.getenv("ADMIN_TOKEN")

        if not admin_token:
            raise ValueError("ADMIN_TOKEN environment variable is required")

        return cls(admin_token=admin_token)

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If configuration is invalid
        """
        if len(self.admin_token) < MIN_ADMIN_TOKEN_LENGTH:
            raise ValueError(
                f"ADMIN_TOKEN must be at least {MIN_ADMIN_TOKEN_LENGTH} characters"
            )


def get_config() -> SecurityConfig:
    """Get validated security configuration.

    Returns:
        Validated SecurityConfig instance

    Raises:
        ValueError: If configuration is invalid
    """
    config = SecurityConfig.from_env()
    config.validate()
    return config
