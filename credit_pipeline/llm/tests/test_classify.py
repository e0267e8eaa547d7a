"""Failure classification tests. Status code first, then class name, then message."""
import asyncio

import pytest

from credit_pipeline.llm.classify import classify_error, classify_message, to_gateway_error
from credit_pipeline.llm.errors import ErrorKind, GatewayError


class _StatusError(Exception):
    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


@pytest.mark.parametrize(
    ("status", "kind"),
    [
        (401, ErrorKind.AUTHENTICATION),
        (403, ErrorKind.AUTHENTICATION),
        (429, ErrorKind.RATE_LIMITED),
        (400, ErrorKind.VALIDATION),
        (500, ErrorKind.SERVER_ERROR),
        (503, ErrorKind.SERVER_ERROR),
        (504, ErrorKind.TIMEOUT),
    ],
)
def test_status_code_wins(status: int, kind: ErrorKind) -> None:
    assert classify_error(_StatusError("boom", status)) is kind


def test_429_with_quota_message_is_quota_exceeded() -> None:
    e = _StatusError("You exceeded your current quota, please check your billing", 429)
    assert classify_error(e) is ErrorKind.QUOTA_EXCEEDED


def test_class_name_mapping() -> None:
    class AuthenticationError(Exception):
        pass

    class APIConnectionError(Exception):
        pass

    assert classify_error(AuthenticationError("nope")) is ErrorKind.AUTHENTICATION
    assert classify_error(APIConnectionError("reset")) is ErrorKind.CONNECTION_ERROR


def test_asyncio_timeout_is_timeout() -> None:
    assert classify_error(asyncio.TimeoutError()) is ErrorKind.TIMEOUT


def test_message_patterns_in_order() -> None:
    assert classify_message("Incorrect API key provided") is ErrorKind.AUTHENTICATION
    assert classify_message("Too many requests") is ErrorKind.RATE_LIMITED
    assert classify_message("billing hard limit reached") is ErrorKind.QUOTA_EXCEEDED
    assert classify_message("request timed out") is ErrorKind.TIMEOUT
    assert classify_message("network unreachable") is ErrorKind.CONNECTION_ERROR
    assert classify_message("invalid messages field") is ErrorKind.VALIDATION
    assert classify_message("upstream server error") is ErrorKind.SERVER_ERROR
    assert classify_message("something odd") is ErrorKind.UNKNOWN


def test_to_gateway_error_redacts_and_keeps_retryable_flag() -> None:
    class AuthenticationError(Exception):
        pass

    out = to_gateway_error(AuthenticationError("bad key sk-abcdefghijklmnopqrstuvwxyz123"))
    assert isinstance(out, GatewayError)
    assert out.kind is ErrorKind.AUTHENTICATION
    assert out.retryable is False
    assert "sk-abc" not in str(out)
    assert out.details == "AuthenticationError"


def test_unknown_is_retryable() -> None:
    out = to_gateway_error(ValueError("something else"))
    assert out.kind is ErrorKind.UNKNOWN
    assert out.retryable is True


def test_existing_gateway_error_passes_through() -> None:
    e = GatewayError("x", kind=ErrorKind.TIMEOUT)
    assert to_gateway_error(e) is e


@pytest.mark.parametrize(
    ("message", "kind"),
    [
        ("Invalid value for max_tokens", ErrorKind.VALIDATION),
        ("invalid max_tokens: must be positive", ErrorKind.VALIDATION),
        ("Invalid access token", ErrorKind.AUTHENTICATION),
        ("invalid_api_key", ErrorKind.AUTHENTICATION),
        ("Invalid token", ErrorKind.AUTHENTICATION),
    ],
)
def test_invalid_key_or_token_wording(message: str, kind: ErrorKind) -> None:
    assert classify_message(message) is kind
