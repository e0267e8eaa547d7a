"""
LiteLLM client wrapper: one chat-completion POST, request/response normalization.
No retries and no concurrency control here; both belong to the queue.
Provider exceptions are classified by classify_error and re-raised as GatewayError.
"""
from __future__ import annotations

import time
from typing import Any

from litellm import acompletion

from credit_pipeline.llm.classify import to_gateway_error
from credit_pipeline.llm.types import LLMRequest, LLMResponse, LLMUsage


def _request_to_kwargs(req: LLMRequest, model: str, timeout_s: float) -> dict[str, Any]:
    """Build LiteLLM completion kwargs: {model, messages, temperature, max_tokens}."""
    kwargs: dict[str, Any] = {
        "model": model,
        "messages": [m.model_dump() for m in req.messages],
        "timeout": timeout_s,
    }
    if req.temperature is not None:
        kwargs["temperature"] = req.temperature
    if req.max_output_tokens is not None:
        kwargs["max_tokens"] = req.max_output_tokens
    return kwargs


def _response_from_completion(raw: Any, model: str, latency_ms: int) -> LLMResponse:
    """Build LLMResponse from a {choices:[{message:{content}}]} completion."""
    text = ""
    usage = None
    finish_reason = None
    choices = getattr(raw, "choices", None)
    if choices:
        c0 = choices[0]
        msg = getattr(c0, "message", None)
        if msg is not None:
            text = getattr(msg, "content", None) or ""
        finish_reason = getattr(c0, "finish_reason", None)
    u = getattr(raw, "usage", None)
    if u:
        usage = LLMUsage(
            input_tokens=getattr(u, "prompt_tokens", 0) or 0,
            output_tokens=getattr(u, "completion_tokens", 0) or 0,
            total_tokens=getattr(u, "total_tokens", 0) or 0,
        )
    return LLMResponse(
        text=text,
        model=getattr(raw, "model", None) or model,
        latency_ms=latency_ms,
        usage=usage,
        finish_reason=finish_reason,
    )


class LiteLLMClient:
    """Async LiteLLM wrapper for a chat-completion endpoint with bearer auth."""

    def __init__(self, *, drop_params: bool = True) -> None:
        self._drop_params = drop_params

    async def acompletion(
        self,
        model: str,
        req: LLMRequest,
        *,
        timeout_s: float,
        api_base: str | None = None,
        api_key: str | None = None,
    ) -> LLMResponse:
        """Execute one completion. Raises GatewayError on failure."""
        kwargs = _request_to_kwargs(req, model, timeout_s)
        if self._drop_params:
            kwargs["drop_params"] = True
        if api_base is not None:
            kwargs["api_base"] = api_base
        if api_key is not None:
            kwargs["api_key"] = api_key
        t0 = time.perf_counter()
        try:
            raw = await acompletion(**kwargs)
        except Exception as e:  # noqa: BLE001
            raise to_gateway_error(e) from e
        latency_ms = int((time.perf_counter() - t0) * 1000)
        return _response_from_completion(raw, model, latency_ms)
