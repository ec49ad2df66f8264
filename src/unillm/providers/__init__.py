"""Backend adapter implementations.

This package contains one LLMProvider implementation per backend, plus the
name -> class registry the dispatcher selects from.
"""

from .anthropic import AnthropicProvider
from .base import LLMProvider
from .deepseek import DeepSeekProvider
from .google import GoogleProvider
from .mistral import MistralProvider
from .openai import OpenAIProvider
from .streaming import DONE, SSEDecoder

# Provider name -> adapter class
PROVIDERS: dict[str, type[LLMProvider]] = {
    "google": GoogleProvider,
    "openai": OpenAIProvider,
    "deepseek": DeepSeekProvider,
    "mistral": MistralProvider,
    "anthropic": AnthropicProvider,
}

__all__ = [
    "LLMProvider",
    "GoogleProvider",
    "OpenAIProvider",
    "DeepSeekProvider",
    "MistralProvider",
    "AnthropicProvider",
    "PROVIDERS",
    "SSEDecoder",
    "DONE",
]
