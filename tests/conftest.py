"""Pytest fixtures for testing."""

from typing import Any

import pytest


@pytest.fixture
def google_payload() -> dict[str, Any]:
    """A Gemini generateContent success body."""
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": "Hello from Gemini"}]},
                "finishReason": "STOP",
            }
        ],
        "usageMetadata": {"promptTokenCount": 3, "candidatesTokenCount": 4, "totalTokenCount": 7},
        "modelVersion": "gemini-2.5-flash",
    }


@pytest.fixture
def chat_payload() -> dict[str, Any]:
    """A chat-completions success body (DeepSeek / Mistral)."""
    return {
        "id": "cmpl-1",
        "object": "chat.completion",
        "model": "deepseek-chat",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": "Hello from chat"},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 5, "completion_tokens": 3, "total_tokens": 8},
    }


@pytest.fixture
def openai_payload() -> dict[str, Any]:
    """An OpenAI Responses API success body."""
    return {
        "id": "resp_123",
        "object": "response",
        "model": "gpt-4o-mini",
        "output": [
            {
                "type": "message",
                "role": "assistant",
                "content": [
                    {"type": "output_text", "text": "Hello ", "annotations": []},
                    {"type": "output_text", "text": "from OpenAI", "annotations": []},
                ],
            }
        ],
        "usage": {"input_tokens": 4, "output_tokens": 3, "total_tokens": 7},
    }


@pytest.fixture
def anthropic_payload() -> dict[str, Any]:
    """An Anthropic Messages API success body."""
    return {
        "id": "msg_1",
        "type": "message",
        "role": "assistant",
        "model": "claude-sonnet-4-5",
        "content": [{"type": "text", "text": "Hello from Claude"}],
        "stop_reason": "end_turn",
        "usage": {"input_tokens": 6, "output_tokens": 4},
    }
