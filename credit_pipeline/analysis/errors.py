"""Analysis errors."""
from __future__ import annotations

from credit_pipeline.llm.errors import ErrorKind


class ResultValidationError(Exception):
    """Model output was unparsable or lacked the whole result structure. Retryable at job level."""

    kind = ErrorKind.VALIDATION
    retryable = True
