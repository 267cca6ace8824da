"""Configuration management using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Built once at startup and handed to the adapters that need it. Nothing
    below the bootstrap layer reads the environment on its own.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Riot API
    riot_api_key: str = Field(
        default="RGAPI-test-key-not-set",
        description="Riot Games API key used for League of Legends endpoints",
    )
    tft_riot_api_key: str | None = Field(
        default=None,
        description="Riot Games API key for TFT endpoints (defaults to riot_api_key)",
    )

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///lp_recap.db",
        description="SQLAlchemy async connection string",
    )

    # Discord
    discord_bot_token: str | None = Field(
        default=None,
        description="Discord bot token; the bot does not start without it",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional rotating log file",
    )

    # Routing
    match_region: str = Field(
        default="americas",
        description="Regional routing value for account and match endpoints",
    )
    platform: str = Field(
        default="na1",
        description="Platform routing value for league endpoints",
    )
    working_timezone: str = Field(
        default="America/New_York",
        description="Time zone in which daily recap windows are computed",
    )

    # Rate limiting / HTTP
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per rate limit window",
    )
    rate_limit_window_seconds: int = Field(
        default=120,
        description="Rate limit window in seconds",
    )
    max_rate_limit_retries: int = Field(
        default=3,
        ge=0,
        description="How many 429 responses to absorb before giving up on a request",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Total timeout for a single HTTP request",
    )

    # Match cache
    max_concurrent_fetches: int | None = Field(
        default=None,
        ge=1,
        description="Upper bound on concurrent upstream match fetches (unset = unbounded)",
    )

    # Commands
    recap_match_count: int = Field(default=25, ge=1, le=100)
    winrate_match_count: int = Field(default=10, ge=1, le=100)

    @property
    def tft_api_key(self) -> str:
        """API key for TFT endpoints."""
        return self.tft_riot_api_key or self.riot_api_key


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
