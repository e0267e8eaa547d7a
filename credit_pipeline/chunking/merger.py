"""Combine per-chunk partial results into one result with a single extra model call."""
from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from credit_pipeline.chunking.prompts import merge_messages
from credit_pipeline.llm.types import LLMMessage

logger = logging.getLogger(__name__)


@runtime_checkable
class ModelCallerPort(Protocol):
    """Rate-limited, cancellable model call bound to one job. Raises GatewayError on failure."""

    async def call(
        self,
        messages: list[LLMMessage],
        *,
        stage: str,
        max_output_tokens: int | None = None,
    ) -> str:
        ...


class ResultMerger:
    """Merges partial results. A single partial is returned as-is with no call spent."""

    def __init__(self, *, max_output_tokens: int | None = None) -> None:
        self._max_output_tokens = max_output_tokens

    async def merge(self, partials: list[str], caller: ModelCallerPort) -> str:
        if not partials:
            raise ValueError("merge requires at least one partial result")
        if len(partials) == 1:
            return partials[0]
        logger.info("merging partial results", extra={"partials": len(partials)})
        return await caller.call(
            merge_messages(partials),
            stage="merge",
            max_output_tokens=self._max_output_tokens,
        )
