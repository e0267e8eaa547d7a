"""Typed request/response models for the model gateway (Pydantic v2)."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class LLMMessage(BaseModel):
    """Single message in OpenAI-style format."""

    role: Literal["system", "user", "assistant"]
    content: str


class LLMRequest(BaseModel):
    """Request for a single chat completion. model_dump() is stable for hashing."""

    messages: list[LLMMessage]
    model: str | None = None
    temperature: float | None = None
    max_output_tokens: int | None = None
    timeout_s: float | None = None
    request_id: str | None = None
    retry_count: int = 0
    metadata: dict[str, str] = Field(default_factory=dict)


class LLMUsage(BaseModel):
    """Token usage reported by the provider."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


class LLMResponse(BaseModel):
    """Normalized completion response."""

    text: str
    model: str
    latency_ms: int
    request_id: str = ""
    usage: LLMUsage | None = None
    finish_reason: str | None = None
