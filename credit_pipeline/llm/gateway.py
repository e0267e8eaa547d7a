"""
ModelGateway: single entrypoint for chat-completion calls.
Fills request defaults, enforces the hard timeout, honours cancellation,
classifies failures and emits one CallMetric per call. Never retries.
"""
from __future__ import annotations

import asyncio
import logging
import time
import uuid

from credit_pipeline.cancellation import CancellationToken, OperationCancelled
from credit_pipeline.llm.classify import to_gateway_error
from credit_pipeline.llm.client_litellm import LiteLLMClient
from credit_pipeline.llm.errors import ErrorKind, GatewayError
from credit_pipeline.llm.ports import LLMClientPort, TelemetrySinkPort
from credit_pipeline.llm.settings import LLMSettings
from credit_pipeline.llm.telemetry import CallMetric, emit_call_metric, log_llm_call
from credit_pipeline.llm.types import LLMRequest, LLMResponse

logger = logging.getLogger(__name__)


class ModelGateway:
    """Performs one completion per call. Retry policy belongs to the caller."""

    def __init__(
        self,
        settings: LLMSettings,
        *,
        client: LLMClientPort | None = None,
        telemetry: TelemetrySinkPort | None = None,
    ) -> None:
        self._settings = settings
        self._client = client or LiteLLMClient(drop_params=settings.drop_unsupported_params)
        self._telemetry = telemetry

    @property
    def settings(self) -> LLMSettings:
        return self._settings

    def _with_defaults(self, req: LLMRequest) -> LLMRequest:
        s = self._settings
        return req.model_copy(
            update={
                "model": req.model or s.model,
                "temperature": s.temperature if req.temperature is None else req.temperature,
                "max_output_tokens": req.max_output_tokens or s.max_output_tokens,
                "timeout_s": req.timeout_s or s.default_timeout_s,
                "request_id": req.request_id or uuid.uuid4().hex,
            }
        )

    async def complete(
        self,
        req: LLMRequest,
        *,
        cancel: CancellationToken | None = None,
    ) -> LLMResponse:
        """
        Execute one completion. Raises GatewayError with a classified kind on failure:
        CANCELLED when the token trips, TIMEOUT when the hard timeout elapses.
        """
        req = self._with_defaults(req)
        model = req.model or self._settings.model
        timeout_s = float(req.timeout_s or self._settings.default_timeout_s)
        request_id = req.request_id or ""
        stage = req.metadata.get("stage")
        job_id = req.metadata.get("job_id")

        t0 = time.perf_counter()
        error: GatewayError | None = None
        cause: BaseException | None = None
        try:
            # A tripped token never creates the client coroutine.
            if cancel is not None:
                cancel.raise_if_cancelled()
            call = self._client.acompletion(
                model,
                req,
                timeout_s=timeout_s,
                api_base=self._settings.api_base,
                api_key=self._settings.api_key,
            )
            if cancel is not None:
                resp = await cancel.run(call, timeout_s=timeout_s)
            else:
                resp = await asyncio.wait_for(call, timeout=timeout_s)
        except OperationCancelled as e:
            error = GatewayError(str(e), kind=ErrorKind.CANCELLED)
            cause = e
        except asyncio.TimeoutError as e:
            error = GatewayError(f"Model call exceeded {timeout_s:g}s timeout", kind=ErrorKind.TIMEOUT)
            cause = e
        except Exception as e:  # noqa: BLE001
            error = to_gateway_error(e)
            cause = e
        latency_ms = int((time.perf_counter() - t0) * 1000)

        if error is not None:
            metric = CallMetric(
                request_id=request_id,
                model=model,
                success=False,
                latency_ms=latency_ms,
                error_type=error.kind.value,
                retry_count=req.retry_count,
            )
            log_llm_call(metric, stage=stage, job_id=job_id)
            emit_call_metric(self._telemetry, metric)
            if error is cause:
                raise error
            raise error from cause

        resp = resp.model_copy(update={"request_id": request_id, "latency_ms": latency_ms})
        metric = CallMetric(
            request_id=request_id,
            model=resp.model,
            success=True,
            latency_ms=latency_ms,
            retry_count=req.retry_count,
        )
        log_llm_call(metric, stage=stage, job_id=job_id)
        emit_call_metric(self._telemetry, metric)
        return resp
