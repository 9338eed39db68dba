"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./bakery.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to call the API from a browser",
    )
    app_timezone: str = Field(
        default="UTC",
        description="IANA name or UTC offset used to localize stored timestamps",
    )
    activity_collector_url: str | None = Field(
        default=None,
        description="Remote endpoint receiving batched activity events; unset disables outbound tracking",
    )
    activity_tracking_enabled: bool = Field(
        default=True,
        description="Global switch for outbound activity tracking",
    )
    activity_batch_size: int = Field(
        default=10,
        description="Number of queued events that triggers a flush",
        gt=0,
    )
    activity_flush_interval_ms: int = Field(
        default=5000,
        description="Milliseconds between periodic flushes of queued events",
        gt=0,
    )
    activity_request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout applied to regular activity deliveries",
        gt=0,
    )
    activity_beacon_timeout_seconds: float = Field(
        default=2.0,
        description="Timeout applied to the final delivery performed at shutdown",
        gt=0,
    )
    client_activity_rate_window_ms: int = Field(
        default=60_000,
        description="Sliding window used to throttle the activity collection endpoint",
        gt=0,
    )
    client_activity_rate_max_requests: int = Field(
        default=30,
        description="Accepted collection requests per client inside the window",
        gt=0,
    )

    @model_validator(mode="after")
    def _validate_collector_url(self) -> "Settings":
        if self.activity_collector_url is not None:
            url = self.activity_collector_url.strip()
            if not url.startswith(("http://", "https://")):
                raise ValueError(
                    "ACTIVITY_COLLECTOR_URL must be an absolute http(s) URL"
                )
            self.activity_collector_url = url
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
