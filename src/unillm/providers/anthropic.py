"""Anthropic provider implementation.

Implements the LLMProvider interface for Anthropic's Messages API.
Streaming is not implemented for this backend.
"""

from collections.abc import AsyncIterator
from typing import Any

from ..errors import ErrorCode, SDKError
from ..models import GenerateRequest, ProviderParams, StreamEvent
from .base import JSON_HEADERS, LLMProvider

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MAX_TOKENS = 1024


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API provider (non-streaming only)."""

    SUPPORTED_FEATURES = frozenset({"system_message", "raw"})

    @property
    def name(self) -> str:
        """Provider identifier."""
        return "anthropic"

    def _build_request(
        self, params: ProviderParams, api_key: str, stream: bool
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        headers = {
            **JSON_HEADERS,
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

        body: dict[str, Any] = {
            "model": params.model,
            "max_tokens": params.max_tokens or DEFAULT_MAX_TOKENS,
            "messages": [{"role": "user", "content": params.prompt}],
        }
        if params.system:
            # Anthropic takes system as a top-level parameter
            body["system"] = params.system
        if params.temperature is not None:
            body["temperature"] = params.temperature

        return ANTHROPIC_MESSAGES_URL, headers, body

    def _extract_text(self, data: dict[str, Any]) -> str:
        blocks = data.get("content") or []
        return "".join(
            block.get("text", "")
            for block in blocks
            if isinstance(block, dict) and block.get("type", "text") == "text"
        )

    def invoke_stream(
        self, request: GenerateRequest, api_key: str
    ) -> AsyncIterator[StreamEvent]:
        """Always fails: raised on call, before any connection is opened."""
        raise SDKError(
            "Streaming is not supported for anthropic",
            self.name,
            ErrorCode.STREAMING_NOT_SUPPORTED,
        )
