"""Port interfaces for the llm module. Other modules depend on these, not on implementations."""
from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from credit_pipeline.llm.types import LLMRequest, LLMResponse

if TYPE_CHECKING:
    from credit_pipeline.llm.telemetry import CallMetric


@runtime_checkable
class LLMClientPort(Protocol):
    """Low-level, single-shot completion. Used by the gateway."""

    async def acompletion(
        self,
        model: str,
        req: LLMRequest,
        *,
        timeout_s: float,
        api_base: str | None = None,
        api_key: str | None = None,
    ) -> LLMResponse:
        """Execute one completion. Raises GatewayError (or a provider exception) on failure."""
        ...


@runtime_checkable
class TelemetrySinkPort(Protocol):
    """Consumer of per-call metric records. May block; called off the event loop."""

    def record(self, metric: "CallMetric") -> None:
        ...
