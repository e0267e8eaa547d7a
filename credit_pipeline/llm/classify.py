"""
Failure classification for model calls. The only place that inspects error text.
Order: HTTP status code, then provider exception class name, then message patterns.
"""
from __future__ import annotations

import asyncio
import re

from credit_pipeline.llm.errors import ErrorKind, GatewayError
from credit_pipeline.llm.telemetry import redact_preview

_STATUS_KINDS: dict[int, ErrorKind] = {
    400: ErrorKind.VALIDATION,
    401: ErrorKind.AUTHENTICATION,
    403: ErrorKind.AUTHENTICATION,
    404: ErrorKind.VALIDATION,
    408: ErrorKind.TIMEOUT,
    409: ErrorKind.SERVER_ERROR,
    413: ErrorKind.VALIDATION,
    422: ErrorKind.VALIDATION,
    429: ErrorKind.RATE_LIMITED,
}

# Class names from LiteLLM / openai / httpx; matched by name so layout changes are safe.
_EXCEPTION_NAME_KINDS: dict[str, ErrorKind] = {
    "AuthenticationError": ErrorKind.AUTHENTICATION,
    "PermissionDeniedError": ErrorKind.AUTHENTICATION,
    "RateLimitError": ErrorKind.RATE_LIMITED,
    "APITimeoutError": ErrorKind.TIMEOUT,
    "Timeout": ErrorKind.TIMEOUT,
    "TimeoutError": ErrorKind.TIMEOUT,
    "ReadTimeout": ErrorKind.TIMEOUT,
    "ConnectTimeout": ErrorKind.TIMEOUT,
    "BadRequestError": ErrorKind.VALIDATION,
    "InvalidRequestError": ErrorKind.VALIDATION,
    "UnprocessableEntityError": ErrorKind.VALIDATION,
    "ContextWindowExceededError": ErrorKind.VALIDATION,
    "NotFoundError": ErrorKind.VALIDATION,
    "APIConnectionError": ErrorKind.CONNECTION_ERROR,
    "ConnectError": ErrorKind.CONNECTION_ERROR,
    "ConnectionError": ErrorKind.CONNECTION_ERROR,
    "RemoteProtocolError": ErrorKind.CONNECTION_ERROR,
    "InternalServerError": ErrorKind.SERVER_ERROR,
    "ServiceUnavailableError": ErrorKind.SERVER_ERROR,
}

# First match wins.
_MESSAGE_PATTERNS: list[tuple[ErrorKind, re.Pattern[str]]] = [
    (
        ErrorKind.AUTHENTICATION,
        re.compile(
            r"api key|authentication|unauthori[sz]ed|invalid[ _-]?(?:api|access|auth|bearer)?[ _-]?(?:key|token)\b",
            re.I,
        ),
    ),
    (ErrorKind.QUOTA_EXCEEDED, re.compile(r"quota|billing|insufficient_quota", re.I)),
    (ErrorKind.RATE_LIMITED, re.compile(r"rate limit|too many requests", re.I)),
    (ErrorKind.TIMEOUT, re.compile(r"timeout|timed out", re.I)),
    (ErrorKind.CONNECTION_ERROR, re.compile(r"network|connection|econnreset|dns", re.I)),
    (ErrorKind.VALIDATION, re.compile(r"invalid|validation|malformed", re.I)),
    (ErrorKind.SERVER_ERROR, re.compile(r"server error|internal error|\b50[0-4]\b|overloaded", re.I)),
]

_QUOTA_PATTERN = _MESSAGE_PATTERNS[1][1]


def status_code_of(exc: BaseException) -> int | None:
    """Best-effort HTTP status from provider exceptions (status_code or response.status_code)."""
    code = getattr(exc, "status_code", None)
    if code is None:
        response = getattr(exc, "response", None)
        code = getattr(response, "status_code", None)
    try:
        return int(code) if code is not None else None
    except (TypeError, ValueError):
        return None


def classify_status(status_code: int, message: str = "") -> ErrorKind | None:
    """Map an HTTP status to a kind. 429 with a quota/billing message is QUOTA_EXCEEDED."""
    if status_code in _STATUS_KINDS:
        kind = _STATUS_KINDS[status_code]
        if kind is ErrorKind.RATE_LIMITED and _QUOTA_PATTERN.search(message or ""):
            return ErrorKind.QUOTA_EXCEEDED
        return kind
    if 500 <= status_code <= 599:
        return ErrorKind.TIMEOUT if status_code == 504 else ErrorKind.SERVER_ERROR
    return None


def classify_message(message: str) -> ErrorKind:
    for kind, pattern in _MESSAGE_PATTERNS:
        if pattern.search(message or ""):
            return kind
    return ErrorKind.UNKNOWN


def classify_error(exc: BaseException) -> ErrorKind:
    """Classify any exception raised while performing a model call."""
    message = str(exc)
    code = status_code_of(exc)
    if code is not None:
        kind = classify_status(code, message)
        if kind is not None:
            return kind
    if isinstance(exc, asyncio.TimeoutError):
        return ErrorKind.TIMEOUT
    name_kind = _EXCEPTION_NAME_KINDS.get(type(exc).__name__)
    if name_kind is not None:
        if name_kind is ErrorKind.RATE_LIMITED and _QUOTA_PATTERN.search(message):
            return ErrorKind.QUOTA_EXCEEDED
        return name_kind
    return classify_message(message)


def to_gateway_error(exc: Exception) -> GatewayError:
    """Wrap a provider exception as a classified GatewayError with a redacted message."""
    if isinstance(exc, GatewayError):
        return exc
    return GatewayError(
        redact_preview(str(exc), max_chars=500) or type(exc).__name__,
        kind=classify_error(exc),
        status_code=status_code_of(exc),
        details=type(exc).__name__,
    )
