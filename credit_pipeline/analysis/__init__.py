"""
Analysis result module: schema, JSON extraction and validation.
Public API: AnalysisResult, ResultValidator, ValidatedResult, ResultValidationError, extract_json.
"""
from credit_pipeline.analysis.errors import ResultValidationError
from credit_pipeline.analysis.extract import extract_json
from credit_pipeline.analysis.schema import SECTION_KEYS, AnalysisResult
from credit_pipeline.analysis.validator import ResultValidator, ValidatedResult

__all__ = [
    "AnalysisResult",
    "SECTION_KEYS",
    "ResultValidator",
    "ValidatedResult",
    "ResultValidationError",
    "extract_json",
]
