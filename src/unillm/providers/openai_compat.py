"""Chat-completions provider base.

DeepSeek and Mistral both speak the chat-completions wire format: a
``messages`` list in, ``choices[0].message.content`` out, and streamed
``choices[0].delta.content`` chunks terminated by ``data: [DONE]``.
"""

from typing import Any

from ..models import ProviderParams, StreamEvent
from .base import JSON_HEADERS, LLMProvider, usage_from


def content_text(content: Any) -> str:
    """Flatten message content, which Mistral may send as a list of chunks."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    return "".join(
        chunk.get("text") or ""
        for chunk in content
        if isinstance(chunk, dict) and chunk.get("type", "text") == "text"
    )


class ChatCompletionsProvider(LLMProvider):
    """Base for backends exposing an OpenAI-compatible chat completions endpoint."""

    url: str = ""

    def _build_request(
        self, params: ProviderParams, api_key: str, stream: bool
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        headers = {**JSON_HEADERS, "Authorization": f"Bearer {api_key}"}

        messages = []
        if params.system:
            messages.append({"role": "system", "content": params.system})
        messages.append({"role": "user", "content": params.prompt})

        body: dict[str, Any] = {
            "model": params.model,
            "messages": messages,
        }
        if params.temperature is not None:
            body["temperature"] = params.temperature
        if params.max_tokens is not None:
            body["max_tokens"] = params.max_tokens
        if stream:
            body["stream"] = True

        return self.url, headers, body

    def _extract_text(self, data: dict[str, Any]) -> str:
        choices = data.get("choices") or []
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return content_text(message.get("content"))

    def _to_event(self, payload: Any) -> StreamEvent | None:
        if not isinstance(payload, dict):
            return None
        if "error" in payload:
            error = payload["error"]
            raise self._api_error(error.get("message", str(error)) if isinstance(error, dict) else str(error))

        choices = payload.get("choices") or [{}]
        choice = choices[0]
        delta = choice.get("delta") or {}

        return StreamEvent(
            text=content_text(delta.get("content")),
            done=choice.get("finish_reason") is not None,
            tokens=usage_from(payload.get("usage"), "prompt_tokens", "completion_tokens", "total_tokens"),
            raw=payload,
            provider=self.name,
        )
