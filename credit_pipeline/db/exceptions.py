"""Errors raised by the persistence layer and the job store."""


class DbError(Exception):
    """Base for persistence errors."""


class NotFoundError(DbError):
    """No row with the given id."""


class InvalidTransitionError(DbError):
    """Status change outside the job state machine (terminal jobs never change)."""

    def __init__(self, job_id: str, current: str, requested: str) -> None:
        super().__init__(f"Job {job_id}: transition {current} -> {requested} not allowed")
        self.job_id = job_id
        self.current = current
        self.requested = requested


class AttemptsExhaustedError(DbError):
    """The job has already used all of its attempts."""
