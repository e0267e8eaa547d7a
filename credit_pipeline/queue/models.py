"""Job model and lifecycle state machine."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class JobStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    CHUNKING = "chunking"
    ANALYZING = "analyzing"
    MERGING = "merging"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES: frozenset[JobStatus] = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})

# QUEUED -> PROCESSING happens only through claim_next.
ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.QUEUED: frozenset({JobStatus.PROCESSING}),
    JobStatus.PROCESSING: frozenset(
        {JobStatus.CHUNKING, JobStatus.ANALYZING, JobStatus.QUEUED, JobStatus.FAILED}
    ),
    JobStatus.CHUNKING: frozenset({JobStatus.ANALYZING, JobStatus.QUEUED, JobStatus.FAILED}),
    JobStatus.ANALYZING: frozenset(
        {JobStatus.MERGING, JobStatus.COMPLETED, JobStatus.QUEUED, JobStatus.FAILED}
    ),
    JobStatus.MERGING: frozenset({JobStatus.COMPLETED, JobStatus.QUEUED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


def can_transition(current: JobStatus, new: JobStatus) -> bool:
    return new in ALLOWED_TRANSITIONS[current]


class Job(BaseModel):
    """Read-only snapshot of a queue item. Changes go through the job store."""

    model_config = ConfigDict(frozen=True)

    id: str
    subject_id: str
    owner_id: str
    status: JobStatus
    priority: int = 0
    attempts: int = 0
    max_attempts: int = 3
    created_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    last_error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @classmethod
    def from_row(cls, row: Any) -> "Job":
        return cls(
            id=row.id,
            subject_id=row.subject_id,
            owner_id=row.owner_id,
            status=JobStatus(row.status),
            priority=row.priority,
            attempts=row.attempts,
            max_attempts=row.max_attempts,
            created_at=row.created_at,
            started_at=row.started_at,
            completed_at=row.completed_at,
            last_error=row.error,
        )


class NotificationMessage(BaseModel):
    """Payload handed to the notifier on terminal transitions."""

    owner_id: str
    title: str
    message: str
    severity: str = "info"
