"""Google Gemini provider implementation.

Implements the LLMProvider interface for the Gemini ``generateContent``
API. Streaming uses ``streamGenerateContent`` with ``alt=sse`` so the
reply is framed as server-sent events.
"""

from typing import Any

from ..models import ProviderParams, StreamEvent
from .base import JSON_HEADERS, LLMProvider, usage_from

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class GoogleProvider(LLMProvider):
    """Gemini generateContent API provider."""

    @property
    def name(self) -> str:
        """Provider identifier."""
        return "google"

    @property
    def display_name(self) -> str:
        return "Gemini"

    def _build_request(
        self, params: ProviderParams, api_key: str, stream: bool
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        if stream:
            url = f"{GEMINI_BASE_URL}/{params.model}:streamGenerateContent?alt=sse"
        else:
            url = f"{GEMINI_BASE_URL}/{params.model}:generateContent"

        headers = {**JSON_HEADERS, "x-goog-api-key": api_key}

        body: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": params.prompt}]}],
        }
        if params.system:
            body["systemInstruction"] = {"parts": [{"text": params.system}]}

        generation_config: dict[str, Any] = {}
        if params.temperature is not None:
            generation_config["temperature"] = params.temperature
        if params.max_tokens is not None:
            generation_config["maxOutputTokens"] = params.max_tokens
        if generation_config:
            body["generationConfig"] = generation_config

        return url, headers, body

    @staticmethod
    def _candidate_text(data: dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict))

    def _extract_text(self, data: dict[str, Any]) -> str:
        return self._candidate_text(data)

    def _to_event(self, payload: Any) -> StreamEvent | None:
        if not isinstance(payload, dict):
            return None
        if "error" in payload:
            error = payload["error"]
            raise self._api_error(error.get("message", str(error)) if isinstance(error, dict) else str(error))

        candidates = payload.get("candidates") or [{}]
        finish_reason = candidates[0].get("finishReason")
        usage = payload.get("usageMetadata")

        return StreamEvent(
            text=self._candidate_text(payload),
            done=finish_reason is not None,
            tokens=usage_from(usage, "promptTokenCount", "candidatesTokenCount", "totalTokenCount"),
            raw=payload,
            provider=self.name,
        )
