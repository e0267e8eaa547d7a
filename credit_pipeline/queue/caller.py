"""ModelCaller: one job attempt's path to the model (rate limit, then gateway)."""
from __future__ import annotations

import json
import logging

from credit_pipeline.cancellation import CancellationToken
from credit_pipeline.llm.cache import ResponseCache
from credit_pipeline.llm.gateway import ModelGateway
from credit_pipeline.llm.telemetry import stable_hash
from credit_pipeline.llm.types import LLMMessage, LLMRequest
from credit_pipeline.ratelimit.bucket import TokenBucket

logger = logging.getLogger(__name__)


def cache_key(model: str, messages: list[LLMMessage]) -> str:
    payload = json.dumps([m.model_dump() for m in messages], sort_keys=True, ensure_ascii=False)
    return stable_hash(f"{model}|{payload}")


class ModelCaller:
    """
    Bound to one job attempt. Every call acquires a rate token and goes through the
    gateway with the job's cancellation token. Calls given a cache key consult the
    response cache first and fill it on success.
    """

    def __init__(
        self,
        gateway: ModelGateway,
        limiter: TokenBucket,
        *,
        job_id: str,
        cancel: CancellationToken,
        retry_count: int = 0,
        cache: ResponseCache | None = None,
    ) -> None:
        self._gateway = gateway
        self._limiter = limiter
        self._job_id = job_id
        self._cancel = cancel
        self._retry_count = retry_count
        self._cache = cache
        self.calls = 0

    def key_for(self, messages: list[LLMMessage]) -> str:
        return cache_key(self._gateway.settings.model, messages)

    async def call(
        self,
        messages: list[LLMMessage],
        *,
        stage: str,
        max_output_tokens: int | None = None,
        cache_key: str | None = None,
    ) -> str:
        if cache_key is not None and self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.debug("response cache hit", extra={"job_id": self._job_id, "stage": stage})
                return cached
        await self._limiter.acquire(1, cancel=self._cancel)
        req = LLMRequest(
            messages=messages,
            max_output_tokens=max_output_tokens,
            retry_count=self._retry_count,
            metadata={"stage": stage, "job_id": self._job_id},
        )
        self.calls += 1
        resp = await self._gateway.complete(req, cancel=self._cancel)
        if cache_key is not None and self._cache is not None:
            self._cache.put(cache_key, resp.text)
        return resp.text
