"""Wire the pipeline from settings: store, collaborators, gateway, limiter, processor, pool."""
from __future__ import annotations

from dataclasses import dataclass

from credit_pipeline.llm.cache import ResponseCache
from credit_pipeline.llm.gateway import ModelGateway
from credit_pipeline.llm.ports import LLMClientPort, TelemetrySinkPort
from credit_pipeline.llm.settings import LLMSettings
from credit_pipeline.queue.adapters import SqlDocumentSource, SqlNotifier, SqlResultSink, SqlTelemetrySink
from credit_pipeline.queue.pool import WorkerPool
from credit_pipeline.queue.ports import DocumentSourcePort, NotifierPort, ResultSinkPort
from credit_pipeline.queue.processor import JobProcessor
from credit_pipeline.queue.settings import QueueSettings
from credit_pipeline.queue.store import SqlJobStore
from credit_pipeline.ratelimit.bucket import TokenBucket
from credit_pipeline.ratelimit.settings import RateLimitSettings


@dataclass
class Pipeline:
    store: SqlJobStore
    gateway: ModelGateway
    limiter: TokenBucket
    processor: JobProcessor
    pool: WorkerPool
    cache: ResponseCache | None
    settings: QueueSettings


def build_pipeline(
    *,
    queue_settings: QueueSettings | None = None,
    llm_settings: LLMSettings | None = None,
    rate_limit_settings: RateLimitSettings | None = None,
    client: LLMClientPort | None = None,
    telemetry: TelemetrySinkPort | None = None,
    store: SqlJobStore | None = None,
    documents: DocumentSourcePort | None = None,
    results: ResultSinkPort | None = None,
    notifier: NotifierPort | None = None,
    limiter: TokenBucket | None = None,
) -> Pipeline:
    """Every collaborator can be overridden; defaults are the SQL adapters over session_scope()."""
    queue_settings = queue_settings or QueueSettings()
    llm_settings = llm_settings or LLMSettings()
    rate_limit_settings = rate_limit_settings or RateLimitSettings()

    store = store or SqlJobStore()
    gateway = ModelGateway(
        llm_settings,
        client=client,
        telemetry=telemetry if telemetry is not None else SqlTelemetrySink(),
    )
    limiter = limiter or TokenBucket.from_settings(rate_limit_settings)
    cache = (
        ResponseCache(max_entries=llm_settings.cache_max_entries, ttl_s=llm_settings.cache_ttl_s)
        if llm_settings.cache_enabled
        else None
    )
    processor = JobProcessor(
        store=store,
        documents=documents or SqlDocumentSource(),
        results=results or SqlResultSink(),
        notifier=notifier or SqlNotifier(),
        gateway=gateway,
        limiter=limiter,
        settings=queue_settings,
        cache=cache,
    )
    pool = WorkerPool(processor, store, queue_settings)
    return Pipeline(
        store=store,
        gateway=gateway,
        limiter=limiter,
        processor=processor,
        pool=pool,
        cache=cache,
        settings=queue_settings,
    )
