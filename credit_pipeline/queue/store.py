"""
SqlJobStore: JobStorePort over SQLAlchemy. Each operation runs in its own
session_scope on a worker thread (asyncio.to_thread); claim_next is a
compare-and-set UPDATE so concurrent claimers never take the same job.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Callable

from sqlalchemy.orm import Session

from credit_pipeline.db.exceptions import AttemptsExhaustedError, InvalidTransitionError, NotFoundError
from credit_pipeline.db.repositories.analysis_job_repo import AnalysisJobRepo
from credit_pipeline.db.session import session_scope
from credit_pipeline.db.utils import utc_now
from credit_pipeline.queue.errors import MAX_ERROR_CHARS
from credit_pipeline.queue.models import TERMINAL_STATUSES, Job, JobStatus, can_transition

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractContextManager[Session]]


class SqlJobStore:
    def __init__(
        self,
        *,
        session_factory: SessionFactory = session_scope,
        clock: Callable[[], datetime] = utc_now,
        repo: AnalysisJobRepo | None = None,
    ) -> None:
        self._session = session_factory
        self._clock = clock
        self._repo = repo or AnalysisJobRepo()

    # --- sync implementations (run off the event loop) ---

    def enqueue_sync(self, subject_id: str, owner_id: str, priority: int = 0, max_attempts: int = 3) -> str:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        with self._session() as s:
            job = self._repo.add(
                s,
                subject_id=subject_id,
                owner_id=owner_id,
                status=JobStatus.QUEUED.value,
                priority=priority,
                max_attempts=max_attempts,
                created_at=self._clock(),
            )
            job_id = job.id
        logger.info("job enqueued", extra={"job_id": job_id, "subject_id": subject_id, "priority": priority})
        return job_id

    def claim_next_sync(self) -> Job | None:
        while True:
            with self._session() as s:
                job_id = self._repo.next_id_with_status(s, JobStatus.QUEUED.value)
                if job_id is None:
                    return None
                claimed = self._repo.compare_and_set(
                    s,
                    job_id,
                    expected_status=JobStatus.QUEUED.value,
                    values={"status": JobStatus.PROCESSING.value, "started_at": self._clock()},
                )
                if claimed:
                    row = self._repo.get(s, job_id)
                    s.refresh(row)
                    return Job.from_row(row)
            logger.debug("lost claim race, retrying", extra={"job_id": job_id})

    def transition_sync(self, job_id: str, new_status: JobStatus, error: str | None = None) -> None:
        new_status = JobStatus(new_status)
        with self._session() as s:
            row = self._repo.get(s, job_id)
            if row is None:
                raise NotFoundError(f"Job {job_id} not found")
            current = JobStatus(row.status)
            if not can_transition(current, new_status):
                raise InvalidTransitionError(job_id, current.value, new_status.value)
            values: dict[str, object] = {"status": new_status.value}
            if error is not None:
                values["error"] = error[:MAX_ERROR_CHARS]
            if new_status in TERMINAL_STATUSES:
                values["completed_at"] = self._clock()
            if new_status is JobStatus.QUEUED:
                values["started_at"] = None
            if not self._repo.compare_and_set(s, job_id, expected_status=current.value, values=values):
                raise InvalidTransitionError(job_id, current.value, new_status.value)
        logger.info(
            "job transition",
            extra={"job_id": job_id, "from_status": current.value, "to_status": new_status.value},
        )

    def increment_attempts_sync(self, job_id: str) -> int:
        with self._session() as s:
            row = self._repo.get(s, job_id)
            if row is None:
                raise NotFoundError(f"Job {job_id} not found")
            if JobStatus(row.status) in TERMINAL_STATUSES:
                raise InvalidTransitionError(job_id, row.status, "attempts+1")
            if not self._repo.increment_attempts(s, job_id):
                raise AttemptsExhaustedError(f"Job {job_id}: attempt budget of {row.max_attempts} exhausted")
            s.refresh(row)
            return row.attempts

    def get_sync(self, job_id: str) -> Job | None:
        with self._session() as s:
            row = self._repo.get(s, job_id)
            return Job.from_row(row) if row is not None else None

    def count_by_status_sync(self) -> dict[JobStatus, int]:
        with self._session() as s:
            raw = self._repo.count_by_status(s)
        return {status: raw.get(status.value, 0) for status in JobStatus}

    def list_recent_sync(self, limit: int = 20) -> list[Job]:
        with self._session() as s:
            return [Job.from_row(r) for r in self._repo.list_recent(s, limit)]

    # --- JobStorePort ---

    async def enqueue(self, subject_id: str, owner_id: str, priority: int = 0, max_attempts: int = 3) -> str:
        return await asyncio.to_thread(self.enqueue_sync, subject_id, owner_id, priority, max_attempts)

    async def claim_next(self) -> Job | None:
        return await asyncio.to_thread(self.claim_next_sync)

    async def transition(self, job_id: str, new_status: JobStatus, error: str | None = None) -> None:
        await asyncio.to_thread(self.transition_sync, job_id, new_status, error)

    async def increment_attempts(self, job_id: str) -> int:
        return await asyncio.to_thread(self.increment_attempts_sync, job_id)

    async def get(self, job_id: str) -> Job | None:
        return await asyncio.to_thread(self.get_sync, job_id)

    async def count_by_status(self) -> dict[JobStatus, int]:
        return await asyncio.to_thread(self.count_by_status_sync)
