"""
Device Auth Server Configuration

Centralized configuration management using Pydantic Settings.
All environment variables are loaded here and accessed through the global `settings` instance.
"""

import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DeviceAuthSettings(BaseSettings):
    """Device auth server settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # ==================== Server Settings ====================
    # API Prefix (e.g., "/auth", or empty string for no prefix)
    auth_server_api_prefix: str = ""

    # ==================== CORS Configuration ====================
    cors_origins: str = "*"  # Comma-separated list of allowed origins, or "*" for all

    # ==================== Client Registry ====================
    clients_config_path: str | None = None

    # ==================== Device Flow Settings ====================
    device_code_expiry_seconds: int = 600  # 10 minutes
    device_code_poll_interval: int = 2
    device_verification_path: str = "user_verify"
    max_code_generation_attempts: int = 10
    device_code_sweep_interval_seconds: int = 60  # 0 disables the background sweep

    # ==================== Device Code Store ====================
    device_code_store: str = "memory"  # memory, redis
    redis_url: str = "redis://localhost:6379/1"
    redis_key_prefix: str = "device_auth"

    # ==================== Logging Settings ====================
    log_level: str = (
        "INFO"  # Default to INFO, can be overridden by LOG_LEVEL env var (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    )
    log_format: str = "%(asctime)s,p%(process)s,{%(filename)s:%(lineno)d},%(levelname)s,%(message)s"

    @property
    def clients_file_path(self) -> Path:
        """Get path to clients.yml file."""
        if self.clients_config_path:
            return Path(self.clients_config_path)
        return Path("config") / "clients.yml"

    @field_validator("device_code_store")
    @classmethod
    def validate_device_code_store(cls, v: str) -> str:
        """Validate device code store backend."""
        allowed = ["memory", "redis"]
        if v.lower() not in allowed:
            raise ValueError(f"device_code_store must be one of {allowed}, got '{v}'")
        return v.lower()

    @field_validator("device_code_expiry_seconds", "device_code_poll_interval", "max_code_generation_attempts")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"value must be a positive integer, got {v}")
        return v

    @field_validator("device_verification_path")
    @classmethod
    def validate_verification_path(cls, v: str) -> str:
        """Strip slashes so the path can be appended as a single segment."""
        stripped = v.strip("/")
        if not stripped:
            raise ValueError("device_verification_path must not be empty")
        return stripped

    def configure_logging(self) -> None:
        """Configure application-wide logging with consistent format and level.

        This should be called once at application startup to initialize logging
        for all modules. Individual modules can then use logging.getLogger(__name__)
        without needing to call basicConfig again.
        """
        # Convert string log level to numeric level
        numeric_level = getattr(logging, self.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=numeric_level,
            format=self.log_format,
            force=True,  # Override any existing configuration
        )


# Global settings instance
settings = DeviceAuthSettings()
