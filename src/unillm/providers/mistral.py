"""Mistral provider (chat completions)."""

from .openai_compat import ChatCompletionsProvider


class MistralProvider(ChatCompletionsProvider):
    """Mistral chat completions API provider."""

    url = "https://api.mistral.ai/v1/chat/completions"

    @property
    def name(self) -> str:
        return "mistral"
