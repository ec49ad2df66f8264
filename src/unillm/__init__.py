"""Unified access layer over several LLM HTTP APIs.

This package provides one request shape and one normalized response shape
for Google Gemini, OpenAI, DeepSeek, Mistral and Anthropic, with automatic
fallback to other configured backends when a non-streaming call fails.
"""

from .client import LLMClient, generate, get_client
from .config import BackendCredentials, BackendRegistration
from .errors import ErrorCode, SDKError
from .models import GenerateRequest, Output, ProviderParams, StreamEvent, Usage
from .validation import validate_config, validate_provider

__all__ = [
    "LLMClient",
    "generate",
    "get_client",
    "BackendRegistration",
    "BackendCredentials",
    "GenerateRequest",
    "ProviderParams",
    "Output",
    "StreamEvent",
    "Usage",
    "SDKError",
    "ErrorCode",
    "validate_config",
    "validate_provider",
]
