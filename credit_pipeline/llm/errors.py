"""Error taxonomy for the model gateway. Kinds are stable strings for persistence and retry decisions."""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Classified failure of one model call (or of a job step that maps onto it)."""

    AUTHENTICATION = "authentication"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"
    CONNECTION_ERROR = "connection_error"
    VALIDATION = "validation"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


RETRYABLE_KINDS: frozenset[ErrorKind] = frozenset(
    {
        ErrorKind.RATE_LIMITED,
        ErrorKind.TIMEOUT,
        ErrorKind.SERVER_ERROR,
        ErrorKind.CONNECTION_ERROR,
        ErrorKind.UNKNOWN,
    }
)


def is_retryable(kind: ErrorKind) -> bool:
    return kind in RETRYABLE_KINDS


class GatewayError(Exception):
    """Classified failure of a model call. details must not leak secrets."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        retryable: bool | None = None,
        status_code: int | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.retryable = is_retryable(kind) if retryable is None else retryable
        self.status_code = status_code
        self.details = details or ""

    def __repr__(self) -> str:
        return f"GatewayError(kind={self.kind.value!r}, retryable={self.retryable}, message={str(self)!r})"

