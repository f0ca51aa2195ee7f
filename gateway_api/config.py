"""Configuration management for the gateway API."""

from pydantic_settings import BaseSettings

from logging_module.config import LoggingConfig
from security.config import SecurityConfig
from stream_registry.config import RegistryConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Stream Auth Gateway"
    app_version: str = "1.0.0"
    api_prefix: str = "/api/v1"
    debug: bool = False
    environment: str = "production"

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Registry
    state_file: str = "/var/lib/stream-gateway/state.bin"
    fsync_writes: bool = True

    # Security
    admin_token: str

    # Logging
    log_level: str = "INFO"
    log_path: str = ""

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    class Config:
        """Pydantic config."""

        env_file = ".env"
        case_sensitive = False

    def registry_config(self) -> RegistryConfig:
        """Registry configuration derived from these settings."""
        return RegistryConfig(state_file=self.state_file, fsync_writes=self.fsync_writes)

    def security_config(self) -> SecurityConfig:
        """Security configuration derived from these settings."""
        return SecurityConfig(admin_token=self.admin_token)

    def logging_config(self) -> LoggingConfig:
        """Logging configuration derived from these settings."""
        return LoggingConfig(log_level=self.log_level.upper(), log_path=self.log_path)
