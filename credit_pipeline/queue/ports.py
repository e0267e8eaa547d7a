"""Port interfaces the worker depends on. SQL implementations live in store.py and adapters.py."""
from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from credit_pipeline.queue.models import Job, JobStatus, NotificationMessage

if TYPE_CHECKING:
    from credit_pipeline.analysis.validator import ValidatedResult


@runtime_checkable
class JobStorePort(Protocol):
    """Durable job records. The only way job state changes."""

    async def enqueue(
        self, subject_id: str, owner_id: str, priority: int = 0, max_attempts: int = 3
    ) -> str:
        ...

    async def claim_next(self) -> Job | None:
        """Atomically move the highest-priority, oldest queued job to processing."""
        ...

    async def transition(self, job_id: str, new_status: JobStatus, error: str | None = None) -> None:
        ...

    async def increment_attempts(self, job_id: str) -> int:
        """Returns the new attempt count."""
        ...

    async def get(self, job_id: str) -> Job | None:
        ...

    async def count_by_status(self) -> dict[JobStatus, int]:
        ...


@runtime_checkable
class DocumentSourcePort(Protocol):
    async def fetch_text(self, subject_id: str) -> str | None:
        """Plain text of the subject document, or None if it does not exist."""
        ...


@runtime_checkable
class ResultSinkPort(Protocol):
    async def mark_processing(self, job: Job) -> None:
        ...

    async def save_result(self, job: Job, result: "ValidatedResult") -> None:
        ...

    async def mark_failed(self, job: Job, message: str) -> None:
        ...


@runtime_checkable
class NotifierPort(Protocol):
    async def notify(self, notification: NotificationMessage) -> None:
        ...
