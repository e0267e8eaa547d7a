"""Rate limiter configuration. Env prefix: RATE_LIMIT_."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RateLimitSettings(BaseSettings):
    """Token bucket shared by every outbound model call in the process."""

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    capacity: int = Field(default=10, ge=1, description="Maximum tokens held by the bucket")
    refill_per_interval: int = Field(default=10, ge=1, description="Tokens added per interval")
    interval_ms: int = Field(default=1000, ge=1, description="Refill interval in milliseconds")
    poll_interval_ms: int = Field(default=100, ge=1, description="Wait between acquire attempts")
