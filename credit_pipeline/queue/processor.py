"""
JobProcessor: drives one claimed job through
processing -> [chunking] -> analyzing -> [merging] -> completed,
or back to queued / to failed according to the job-level retry policy.
"""
from __future__ import annotations

import logging

from credit_pipeline.analysis.validator import ResultValidator, ValidatedResult
from credit_pipeline.cancellation import CancellationToken, OperationCancelled
from credit_pipeline.chunking.chunker import Chunk, split
from credit_pipeline.chunking.merger import ResultMerger
from credit_pipeline.chunking.prompts import analysis_messages
from credit_pipeline.db.exceptions import AttemptsExhaustedError
from credit_pipeline.llm.cache import ResponseCache
from credit_pipeline.llm.errors import ErrorKind
from credit_pipeline.llm.gateway import ModelGateway
from credit_pipeline.queue.caller import ModelCaller
from credit_pipeline.queue.errors import JobFailure
from credit_pipeline.queue.models import Job, JobStatus, NotificationMessage
from credit_pipeline.queue.ports import DocumentSourcePort, JobStorePort, NotifierPort, ResultSinkPort
from credit_pipeline.queue.settings import QueueSettings
from credit_pipeline.ratelimit.bucket import TokenBucket

logger = logging.getLogger(__name__)

SUCCESS_TITLE = "Credit Analysis Complete"
FAILURE_TITLE = "Analysis Failed"
FAILURE_MESSAGE = (
    "We encountered an error analyzing your credit report. "
    "Please try again or contact support if the issue persists."
)


def success_message(score: int | float | None) -> str:
    if score is None:
        return "Your credit analysis is ready. We couldn't determine a specific score from your report."
    return f"Your credit analysis is ready. Your estimated credit score is {score}."


class JobProcessor:
    def __init__(
        self,
        *,
        store: JobStorePort,
        documents: DocumentSourcePort,
        results: ResultSinkPort,
        notifier: NotifierPort,
        gateway: ModelGateway,
        limiter: TokenBucket,
        settings: QueueSettings,
        validator: ResultValidator | None = None,
        merger: ResultMerger | None = None,
        cache: ResponseCache | None = None,
    ) -> None:
        self._store = store
        self._documents = documents
        self._results = results
        self._notifier = notifier
        self._gateway = gateway
        self._limiter = limiter
        self._settings = settings
        self._validator = validator or ResultValidator(
            score_min=settings.score_min, score_max=settings.score_max
        )
        self._merger = merger or ResultMerger(
            max_output_tokens=gateway.settings.merge_max_output_tokens
        )
        self._cache = cache

    async def process(self, job: Job, cancel: CancellationToken) -> JobStatus:
        """Run one attempt of a claimed job. Returns the status the job was left in."""
        try:
            attempts = await self._store.increment_attempts(job.id)
        except AttemptsExhaustedError as e:
            await self._fail(job, JobFailure(ErrorKind.UNKNOWN, str(e), retryable=False))
            return JobStatus.FAILED
        job = job.model_copy(update={"attempts": attempts})
        log_extra = {"job_id": job.id, "attempt": attempts, "max_attempts": job.max_attempts}
        logger.info("job attempt started", extra=log_extra)
        try:
            validated = await self._run(job, cancel)
            await self._results.save_result(job, validated)
            await self._store.transition(job.id, JobStatus.COMPLETED)
        except Exception as exc:  # noqa: BLE001
            failure = JobFailure.from_exception(exc)
            if failure.kind is ErrorKind.UNKNOWN:
                logger.exception("job attempt raised unexpectedly", extra=log_extra)
            else:
                logger.warning(
                    "job attempt failed",
                    extra={**log_extra, "error_type": failure.kind.value, "retryable": failure.retryable},
                )
            return await self._handle_failure(job, failure, cancel)

        logger.info("job completed", extra={**log_extra, "score": validated.score})
        await self._notify(
            NotificationMessage(
                owner_id=job.owner_id,
                title=SUCCESS_TITLE,
                message=success_message(validated.score),
                severity="success",
            )
        )
        return JobStatus.COMPLETED

    async def _run(self, job: Job, cancel: CancellationToken) -> ValidatedResult:
        text = await self._documents.fetch_text(job.subject_id)
        if not text or not text.strip():
            raise JobFailure(ErrorKind.VALIDATION, "No text to analyze", retryable=False)
        await self._results.mark_processing(job)

        caller = ModelCaller(
            self._gateway,
            self._limiter,
            job_id=job.id,
            cancel=cancel,
            retry_count=job.attempts - 1,
            cache=self._cache,
        )
        limit = self._settings.max_chunk_chars
        if len(text) > limit:
            await self._store.transition(job.id, JobStatus.CHUNKING)
            chunks = split(text, limit)
            logger.info("document split", extra={"job_id": job.id, "chunks": len(chunks), "chars": len(text)})
        else:
            chunks = [Chunk(index=0, text=text)]

        await self._store.transition(job.id, JobStatus.ANALYZING)
        multi = len(chunks) > 1
        partials: list[str] = []
        for chunk in chunks:
            cancel.raise_if_cancelled()
            messages = analysis_messages(chunk.text, index=chunk.index, count=len(chunks))
            partials.append(
                await caller.call(
                    messages,
                    stage="analyze",
                    cache_key=caller.key_for(messages) if multi else None,
                )
            )

        if multi:
            await self._store.transition(job.id, JobStatus.MERGING)
        final_text = await self._merger.merge(partials, caller)
        return self._validator.validate_text(final_text)

    async def _handle_failure(self, job: Job, failure: JobFailure, cancel: CancellationToken) -> JobStatus:
        if failure.is_cancelled or not failure.retryable or job.attempts >= job.max_attempts:
            await self._fail(job, failure)
            return JobStatus.FAILED

        delay = self._settings.backoff_s(job.attempts)
        if delay > 0:
            try:
                await cancel.sleep(delay)
            except OperationCancelled as e:
                await self._fail(job, JobFailure.from_exception(e))
                return JobStatus.FAILED
        await self._store.transition(job.id, JobStatus.QUEUED, error=failure.message)
        logger.info(
            "job re-queued",
            extra={"job_id": job.id, "attempt": job.attempts, "backoff_s": delay, "error_type": failure.kind.value},
        )
        return JobStatus.QUEUED

    async def _fail(self, job: Job, failure: JobFailure) -> None:
        await self._store.transition(job.id, JobStatus.FAILED, error=failure.message)
        logger.warning(
            "job failed",
            extra={"job_id": job.id, "attempt": job.attempts, "error_type": failure.kind.value},
        )
        try:
            await self._results.mark_failed(job, failure.message)
        except Exception as e:  # noqa: BLE001
            logger.warning("result sink failed to record job failure: %s", e, extra={"job_id": job.id})
        await self._notify(
            NotificationMessage(
                owner_id=job.owner_id,
                title=FAILURE_TITLE,
                message=FAILURE_MESSAGE,
                severity="error",
            )
        )

    async def _notify(self, notification: NotificationMessage) -> None:
        try:
            await self._notifier.notify(notification)
        except Exception as e:  # noqa: BLE001
            logger.warning("notifier failed: %s", e, extra={"owner_id": notification.owner_id})
