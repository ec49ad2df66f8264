"""DeepSeek provider (chat completions)."""

from .openai_compat import ChatCompletionsProvider


class DeepSeekProvider(ChatCompletionsProvider):
    """DeepSeek chat completions API provider."""

    url = "https://api.deepseek.com/chat/completions"

    @property
    def name(self) -> str:
        return "deepseek"

    @property
    def display_name(self) -> str:
        return "DeepSeek"
