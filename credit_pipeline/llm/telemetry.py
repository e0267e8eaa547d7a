"""Observability: redaction, structured call logs, fire-and-forget call metrics."""
from __future__ import annotations

import asyncio
import hashlib
import logging
import re
from typing import Any

from pydantic import BaseModel

from credit_pipeline.llm.ports import TelemetrySinkPort

logger = logging.getLogger(__name__)

# Redaction: patterns to mask (never log or store raw)
_SECRET_PATTERNS = [
    re.compile(r"\b(?:sk-[a-zA-Z0-9_-]{20,})\b", re.IGNORECASE),  # OpenAI-style
    re.compile(r"\b(?:AIza[a-zA-Z0-9_-]{35})\b"),  # Google API key style
    re.compile(r"\bBearer\s+[a-zA-Z0-9_.-]+", re.IGNORECASE),
]
_PII_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")  # email
_PREVIEW_MAX_CHARS = 200


def redact(text: str) -> str:
    """Mask secrets and e-mail addresses."""
    if not text:
        return ""
    out = text
    for pat in _SECRET_PATTERNS:
        out = pat.sub("[REDACTED]", out)
    return _PII_PATTERN.sub("[EMAIL]", out)


def redact_preview(text: str, max_chars: int = _PREVIEW_MAX_CHARS) -> str:
    """Redact, then truncate. Use for previews and user-facing error strings."""
    out = redact(text)
    if len(out) > max_chars:
        out = out[:max_chars] + "..."
    return out


def stable_hash(content: str) -> str:
    """SHA256 hex digest for canonical cache keys."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class CallMetric(BaseModel):
    """One record per gateway call."""

    request_id: str
    model: str
    success: bool
    latency_ms: int
    error_type: str | None = None
    retry_count: int = 0


def log_llm_call(metric: CallMetric, *, stage: str | None = None, job_id: str | None = None) -> None:
    """Emit structured log for one call. Never log prompt text or API keys."""
    extra: dict[str, Any] = {
        "request_id": metric.request_id,
        "model": metric.model,
        "latency_ms": metric.latency_ms,
        "status": "SUCCEEDED" if metric.success else "FAILED",
        "retry_count": metric.retry_count,
    }
    if stage is not None:
        extra["stage"] = stage
    if job_id is not None:
        extra["job_id"] = job_id
    if metric.error_type is not None:
        extra["error_type"] = metric.error_type
    logger.info("llm_call", extra=extra)


class LoggingTelemetrySink:
    """Default sink: metrics go to the log at DEBUG."""

    def record(self, metric: CallMetric) -> None:
        logger.debug(
            "metric llm_call %s %s success=%s latency_ms=%s error=%s retry=%s",
            metric.request_id,
            metric.model,
            metric.success,
            metric.latency_ms,
            metric.error_type,
            metric.retry_count,
        )


def _log_sink_failure(fut: "asyncio.Future[None]") -> None:
    if fut.cancelled():
        return
    exc = fut.exception()
    if exc is not None:
        logger.warning("telemetry sink failed: %s", exc)


def emit_call_metric(sink: TelemetrySinkPort | None, metric: CallMetric) -> None:
    """Hand the metric to the sink off the event loop. Never raises, never blocks the caller."""
    if sink is None:
        return
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None
    try:
        if loop is None:
            sink.record(metric)
            return
        fut = loop.run_in_executor(None, sink.record, metric)
        fut.add_done_callback(_log_sink_failure)
    except Exception as e:  # noqa: BLE001
        logger.warning("telemetry sink failed: %s", e)
