"""OpenAI provider implementation.

Implements the LLMProvider interface for OpenAI's Responses API. The
stream is a sequence of typed events; text arrives in
``response.output_text.delta`` and usage in ``response.completed``.
"""

from typing import Any

from ..models import ProviderParams, StreamEvent
from .base import JSON_HEADERS, LLMProvider, usage_from

OPENAI_RESPONSES_URL = "https://api.openai.com/v1/responses"

TERMINAL_EVENTS = {"response.completed", "response.incomplete"}
ERROR_EVENTS = {"error", "response.failed"}


class OpenAIProvider(LLMProvider):
    """OpenAI Responses API provider."""

    @property
    def name(self) -> str:
        """Provider identifier."""
        return "openai"

    @property
    def display_name(self) -> str:
        return "OpenAI"

    def _build_request(
        self, params: ProviderParams, api_key: str, stream: bool
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        headers = {**JSON_HEADERS, "Authorization": f"Bearer {api_key}"}

        body: dict[str, Any] = {
            "model": params.model,
            "input": params.prompt,
        }
        if params.system:
            body["instructions"] = params.system
        if params.temperature is not None:
            body["temperature"] = params.temperature
        if params.max_tokens is not None:
            body["max_output_tokens"] = params.max_tokens
        if stream:
            body["stream"] = True

        return OPENAI_RESPONSES_URL, headers, body

    def _extract_text(self, data: dict[str, Any]) -> str:
        if isinstance(data.get("output_text"), str):
            return data["output_text"]

        texts = []
        for item in data.get("output") or []:
            if not isinstance(item, dict):
                continue
            for part in item.get("content") or []:
                if isinstance(part, dict) and part.get("type") == "output_text":
                    texts.append(part.get("text", ""))
        return "".join(texts)

    def _to_event(self, payload: Any) -> StreamEvent | None:
        if not isinstance(payload, dict):
            return None

        event_type = payload.get("type")
        if event_type in ERROR_EVENTS:
            error = payload.get("error") or (payload.get("response") or {}).get("error") or {}
            if isinstance(error, str):
                error = {"message": error}
            message = payload.get("message") or error.get("message") or event_type
            raise self._api_error(message)

        text = ""
        if event_type == "response.output_text.delta":
            text = payload.get("delta") or ""

        tokens = None
        done = event_type in TERMINAL_EVENTS
        if done:
            usage = (payload.get("response") or {}).get("usage")
            tokens = usage_from(usage, "input_tokens", "output_tokens", "total_tokens")

        return StreamEvent(text=text, done=done, tokens=tokens, raw=payload, provider=self.name)
