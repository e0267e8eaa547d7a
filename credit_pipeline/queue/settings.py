"""Queue/worker configuration. Env prefix: QUEUE_."""
from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class QueueSettings(BaseSettings):
    """Worker pool sizing, polling, chunk threshold, retry policy and score bounds."""

    model_config = SettingsConfigDict(
        env_prefix="QUEUE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_concurrent_jobs: int = Field(default=2, ge=1, description="Jobs in flight per process")
    poll_interval_s: float = Field(default=10.0, gt=0, description="Idle wait between store polls")
    max_chunk_chars: int = Field(default=100_000, ge=1, description="Documents longer than this are split")
    default_max_attempts: int = Field(default=3, ge=1, description="Attempt budget for new jobs")
    retry_backoff_base_s: float = Field(default=2.0, ge=0, description="Backoff before re-queue, doubled per attempt")
    retry_backoff_max_s: float = Field(default=60.0, ge=0, description="Backoff cap")
    score_min: int = Field(default=300, description="Lowest valid credit score")
    score_max: int = Field(default=850, description="Highest valid credit score")

    @model_validator(mode="after")
    def validate_bounds(self) -> "QueueSettings":
        if self.score_min > self.score_max:
            raise ValueError("score_min must be <= score_max")
        if self.retry_backoff_base_s > self.retry_backoff_max_s:
            raise ValueError("retry_backoff_base_s must be <= retry_backoff_max_s")
        return self

    def backoff_s(self, attempts: int) -> float:
        """Delay before re-queuing after the given attempt number (1-based)."""
        if attempts < 1:
            return 0.0
        return min(self.retry_backoff_base_s * (2 ** (attempts - 1)), self.retry_backoff_max_s)
