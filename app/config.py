"""
Application configuration using Pydantic settings.
"""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Backing Store Configuration
    store_base_url: str = Field(
        default="",
        description="Base URL of the backing store (empty runs in mock mode)"
    )
    store_api_key: str = Field(
        default="",
        description="Project API key sent with every store request"
    )
    store_access_token: str = Field(
        default="",
        description="Access token of the signed-in principal, if any"
    )
    store_probe_table: str = Field(
        default="monitoring_points",
        description="Table used for the lightweight connectivity probe"
    )
    store_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout in seconds for each store request"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for store calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=1,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=5,
        description="Maximum wait time in seconds between retries"
    )

    # Sample / Mock Data
    bootstrap_sample_data: bool = Field(
        default=True,
        description="Whether to seed sample monitoring points at startup"
    )
    mock_data_seed: Optional[int] = Field(
        default=None,
        description="Seed for mock readings (unset draws fresh values)"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Soil Health Monitoring Service",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)


# Global settings instance
settings = Settings()
