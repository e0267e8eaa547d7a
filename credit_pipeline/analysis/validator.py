"""
Result validation: structural defaults for missing sections and score sanitization.
Out-of-range scores become null; they are never clamped and never fail the result.
"""
from __future__ import annotations

import logging
import math
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from credit_pipeline.analysis.errors import ResultValidationError
from credit_pipeline.analysis.extract import extract_json
from credit_pipeline.analysis.schema import SECTION_KEYS, AnalysisResult

logger = logging.getLogger(__name__)


class ValidatedResult(BaseModel):
    result: AnalysisResult
    warnings: list[str] = Field(default_factory=list)

    @property
    def score(self) -> int | float | None:
        return self.result.score


class ResultValidator:
    def __init__(self, *, score_min: float = 300, score_max: float = 850) -> None:
        if score_min > score_max:
            raise ValueError("score_min must be <= score_max")
        self._min = score_min
        self._max = score_max

    def sanitize_score(self, value: Any) -> tuple[int | float | None, str | None]:
        """Return (score, warning). Anything not a finite number within bounds becomes None."""
        if value is None:
            return None, None
        if isinstance(value, bool):
            return None, f"score {value!r} is not numeric"
        if isinstance(value, str):
            try:
                value = float(value.strip())
            except ValueError:
                return None, f"score {value!r} is not numeric"
        if isinstance(value, int):
            # Compared as int; huge integers do not fit in a float and may not format.
            if not (self._min <= value <= self._max):
                shown = value if value.bit_length() <= 64 else f"of {value.bit_length()} bits"
                return None, f"score {shown} outside [{self._min}, {self._max}]"
            return value, None
        if not isinstance(value, float) or not math.isfinite(value):
            return None, f"score {value!r} is not numeric"
        if not (self._min <= value <= self._max):
            return None, f"score {value} outside [{self._min}, {self._max}]"
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return value, None

    def validate_text(self, text: str) -> ValidatedResult:
        try:
            data = extract_json(text)
        except ValueError as e:
            raise ResultValidationError(f"Unparsable model output: {e}") from e
        return self.validate(data)

    def validate(self, data: Any) -> ValidatedResult:
        if not isinstance(data, dict):
            raise ResultValidationError(f"Expected a JSON object, got {type(data).__name__}")
        if not any(key in data for key in SECTION_KEYS):
            raise ResultValidationError("Model output has none of the result sections")

        warnings: list[str] = []
        shaped: dict[str, Any] = dict(data)
        for key in SECTION_KEYS:
            section = shaped.get(key)
            if not isinstance(section, dict):
                if key in shaped:
                    warnings.append(f"section {key} is not an object; using empty default")
                else:
                    warnings.append(f"section {key} missing; using empty default")
                shaped[key] = {}

        overview = dict(shaped["overview"])
        score, score_warning = self.sanitize_score(overview.get("score"))
        overview["score"] = score
        shaped["overview"] = overview
        if score_warning:
            warnings.append(score_warning)

        try:
            result = AnalysisResult.model_validate(shaped)
        except ValidationError as e:
            raise ResultValidationError(f"Result failed schema validation: {e.error_count()} error(s)") from e
        if warnings:
            logger.info("result validated with warnings", extra={"warnings": warnings})
        return ValidatedResult(result=result, warnings=warnings)
