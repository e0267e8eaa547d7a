"""
WorkerPool: bounded number of jobs in flight per process.
Polls the job store on a fixed interval and refills as soon as a job finishes.
"""
from __future__ import annotations

import asyncio
import logging

from credit_pipeline.cancellation import CancellationToken
from credit_pipeline.queue.models import Job, JobStatus
from credit_pipeline.queue.ports import JobStorePort
from credit_pipeline.queue.processor import JobProcessor
from credit_pipeline.queue.settings import QueueSettings

logger = logging.getLogger(__name__)


class WorkerPool:
    def __init__(self, processor: JobProcessor, store: JobStorePort, settings: QueueSettings) -> None:
        self._processor = processor
        self._store = store
        self._settings = settings
        self._slots = asyncio.Semaphore(settings.max_concurrent_jobs)
        self._tasks: dict[str, asyncio.Task[JobStatus | None]] = {}
        self._tokens: dict[str, CancellationToken] = {}
        self._wake = asyncio.Event()
        self._collector: dict[str, JobStatus] | None = None
        self.processed = 0

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def cancel(self, job_id: str, reason: str = "Cancelled by caller") -> bool:
        """Trip the cancellation token of an in-flight job. False if the job is not running here."""
        token = self._tokens.get(job_id)
        if token is None:
            return False
        token.cancel(reason)
        logger.info("job cancellation requested", extra={"job_id": job_id})
        return True

    def cancel_all(self, reason: str = "Worker shutting down") -> None:
        for token in list(self._tokens.values()):
            token.cancel(reason)

    async def fill(self) -> int:
        """Claim jobs until every slot is busy or the queue is empty. Returns jobs started."""
        started = 0
        while not self._slots.locked():
            await self._slots.acquire()
            try:
                job = await self._store.claim_next()
            except BaseException:
                self._slots.release()
                raise
            if job is None:
                self._slots.release()
                break
            self._start(job)
            started += 1
        return started

    def _start(self, job: Job) -> None:
        token = CancellationToken()
        self._tokens[job.id] = token
        self._tasks[job.id] = asyncio.create_task(self._execute(job, token), name=f"job-{job.id}")

    async def _execute(self, job: Job, token: CancellationToken) -> JobStatus | None:
        status: JobStatus | None = None
        try:
            status = await self._processor.process(job, token)
            self.processed += 1
            if self._collector is not None:
                self._collector[job.id] = status
        except Exception:  # noqa: BLE001
            logger.exception("job processing crashed", extra={"job_id": job.id})
        finally:
            self._tasks.pop(job.id, None)
            self._tokens.pop(job.id, None)
            self._slots.release()
            self._wake.set()
        return status

    async def _wait(self, stop_event: asyncio.Event | None, timeout: float | None) -> None:
        waiters = [asyncio.ensure_future(self._wake.wait())]
        if stop_event is not None:
            waiters.append(asyncio.ensure_future(stop_event.wait()))
        try:
            await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for w in waiters:
                w.cancel()

    async def _join_in_flight(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def drain(self) -> dict[str, JobStatus]:
        """Process until the queue is empty and nothing is in flight. Returns final status per job run by this call."""
        collected: dict[str, JobStatus] = {}
        self._collector = collected
        try:
            while True:
                self._wake.clear()
                await self.fill()
                if not self._tasks:
                    return collected
                await self._wait(None, None)
        finally:
            self._collector = None

    async def run(self, stop_event: asyncio.Event) -> None:
        """Long-running loop. On stop, waits for in-flight jobs to reach their next resting state."""
        logger.info(
            "worker pool started",
            extra={
                "max_concurrent_jobs": self._settings.max_concurrent_jobs,
                "poll_interval_s": self._settings.poll_interval_s,
            },
        )
        try:
            while not stop_event.is_set():
                self._wake.clear()
                try:
                    await self.fill()
                except Exception:  # noqa: BLE001
                    logger.exception("claiming jobs failed; retrying after poll interval")
                await self._wait(stop_event, self._settings.poll_interval_s)
        finally:
            await self._join_in_flight()
            logger.info("worker pool stopped", extra={"processed": self.processed})
