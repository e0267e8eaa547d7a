"""JobFailure: the single input to the fail-or-requeue decision."""
from __future__ import annotations

from credit_pipeline.analysis.errors import ResultValidationError
from credit_pipeline.cancellation import OperationCancelled
from credit_pipeline.llm.errors import ErrorKind, GatewayError, is_retryable
from credit_pipeline.llm.telemetry import redact_preview

MAX_ERROR_CHARS = 4096


class JobFailure(Exception):
    """Normalized failure of one job attempt. message is already sanitized of secrets."""

    def __init__(self, kind: ErrorKind, message: str, *, retryable: bool | None = None) -> None:
        self.kind = kind
        self.retryable = is_retryable(kind) if retryable is None else retryable
        self.message = redact_preview(message or kind.value, max_chars=MAX_ERROR_CHARS)
        super().__init__(self.message)

    @property
    def is_cancelled(self) -> bool:
        return self.kind is ErrorKind.CANCELLED

    @classmethod
    def from_exception(cls, exc: BaseException) -> "JobFailure":
        if isinstance(exc, JobFailure):
            return exc
        if isinstance(exc, GatewayError):
            return cls(exc.kind, f"{exc.kind.value}: {exc}", retryable=exc.retryable)
        if isinstance(exc, ResultValidationError):
            return cls(ErrorKind.VALIDATION, f"validation: {exc}", retryable=True)
        if isinstance(exc, OperationCancelled):
            return cls(ErrorKind.CANCELLED, str(exc), retryable=False)
        return cls(ErrorKind.UNKNOWN, f"unknown: {type(exc).__name__}: {exc}", retryable=True)

    def __repr__(self) -> str:
        return f"JobFailure(kind={self.kind.value!r}, retryable={self.retryable}, message={self.message!r})"
