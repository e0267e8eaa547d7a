"""Model gateway configuration. Env prefix: LLM_. Credential: LLM_API_KEY."""
from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseSettings):
    """Settings for the completion client, gateway and response cache. All overridable via LLM_* env vars."""

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: str | None = Field(default=None, description="Bearer credential for the completion API")
    api_base: str | None = Field(default=None, description="Override the chat-completion endpoint base URL")
    model: str = Field(default="gpt-4o", description="Model identifier")
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=4000, ge=1, description="Token budget for analysis calls")
    merge_max_output_tokens: int = Field(default=8000, ge=1, description="Token budget for the merge call")
    default_timeout_s: float = Field(default=120.0, gt=0, description="Hard per-call timeout")
    drop_unsupported_params: bool = Field(default=True, description="Let LiteLLM drop params a provider rejects")

    cache_enabled: bool = Field(default=True, description="Cache per-chunk partial results")
    cache_ttl_s: float = Field(default=300.0, gt=0, description="Response cache TTL in seconds")
    cache_max_entries: int = Field(default=256, ge=1, description="Response cache capacity")

    @model_validator(mode="after")
    def validate_model(self) -> "LLMSettings":
        if not (self.model or "").strip():
            raise ValueError("model must be a non-empty identifier (set LLM_MODEL)")
        return self
