"""
Application settings loaded from environment variables.

Uses pydantic-settings for automatic loading from .env file.
All settings have sensible defaults for development mode.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration.

    All values are loaded from environment variables.
    Copy .env.example to .env and fill in your values.

    Attributes:
        environment: Runtime environment (development/production)
        use_mock_services: Use mock providers instead of real APIs
        log_level: Logging verbosity
        api_timeout_seconds: Timeout for market data fetches
        provider_timeout_seconds: Timeout for social/news feeds
        birdeye_api_key: Birdeye API key (optional in mock mode)
        birdeye_base_url: Birdeye public API root
        cache_ttl_seconds: Age after which a cached series is refreshed
        cache_eviction_seconds: Idle time after which a series is dropped
        history_lookback_hours: How much history to request per token
    """

    # Environment
    environment: Literal["development", "production"] = "development"
    use_mock_services: bool = True

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Timeouts
    api_timeout_seconds: float = 10.0
    provider_timeout_seconds: float = 2.0

    # Market data (optional when use_mock_services=True)
    birdeye_api_key: str = ""
    birdeye_base_url: str = "https://public-api.birdeye.so"

    # Historical series cache
    cache_ttl_seconds: int = 300
    cache_eviction_seconds: int = 3600
    history_lookback_hours: int = 720

    # Pydantic settings config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Case-insensitive env var names
        case_sensitive=False,
        # Don't fail if .env doesn't exist
        env_ignore_empty=True,
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to avoid re-reading .env file on every call.
    Settings are loaded once and reused throughout the application.

    Returns:
        Settings instance with all configuration values.
    """
    return Settings()
