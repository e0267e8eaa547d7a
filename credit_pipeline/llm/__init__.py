"""
Model gateway module: single typed async interface for chat-completion calls.
Public API: ModelGateway, LLMRequest, LLMResponse, GatewayError, ErrorKind.
Other modules must not call LiteLLM directly.
"""
from credit_pipeline.llm.cache import ResponseCache
from credit_pipeline.llm.classify import classify_error
from credit_pipeline.llm.errors import RETRYABLE_KINDS, ErrorKind, GatewayError, is_retryable
from credit_pipeline.llm.gateway import ModelGateway
from credit_pipeline.llm.settings import LLMSettings
from credit_pipeline.llm.telemetry import CallMetric, LoggingTelemetrySink
from credit_pipeline.llm.types import LLMMessage, LLMRequest, LLMResponse, LLMUsage

__all__ = [
    "ModelGateway",
    "LLMSettings",
    "LLMRequest",
    "LLMResponse",
    "LLMMessage",
    "LLMUsage",
    "GatewayError",
    "ErrorKind",
    "RETRYABLE_KINDS",
    "is_retryable",
    "classify_error",
    "ResponseCache",
    "CallMetric",
    "LoggingTelemetrySink",
]
