"""Backend registration and environment configuration.

The registration is built once per client and never mutated afterwards.
"""

import os
from collections.abc import Mapping
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from .errors import CORE, ErrorCode, SDKError

GOOGLE = "google"
OPENAI = "openai"
DEEPSEEK = "deepseek"
MISTRAL = "mistral"
ANTHROPIC = "anthropic"

BACKENDS: tuple[str, ...] = (GOOGLE, OPENAI, DEEPSEEK, MISTRAL, ANTHROPIC)

# Fallback targets in priority order. Anthropic is not a target.
FALLBACK_ORDER: tuple[str, ...] = (GOOGLE, OPENAI, DEEPSEEK, MISTRAL)

# Substitute model per fallback target.
FALLBACK_MODELS: dict[str, str] = {
    GOOGLE: "gemini-2.5-flash",
    OPENAI: "gpt-4o-mini",
    DEEPSEEK: "deepseek-chat",
    MISTRAL: "mistral-small-latest",
}

ENV_KEYS: dict[str, str] = {
    GOOGLE: "GOOGLE_API_KEY",
    OPENAI: "OPENAI_API_KEY",
    DEEPSEEK: "DEEPSEEK_API_KEY",
    MISTRAL: "MISTRAL_API_KEY",
    ANTHROPIC: "ANTHROPIC_API_KEY",
}

_TRUTHY = {"1", "true", "yes", "on"}


class BackendCredentials(BaseModel):
    """Credentials for one backend."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_key: str = Field(default="", alias="apiKey")


class BackendRegistration(BaseModel):
    """Per-client configuration: which backends have keys, and policy flags.

    Configuration (env vars, via ``from_env``):
    - GOOGLE_API_KEY, OPENAI_API_KEY, DEEPSEEK_API_KEY, MISTRAL_API_KEY,
      ANTHROPIC_API_KEY: register the backend when set
    - LLM_FALLBACK: enable fallback (default: off)
    - LLM_TIMEOUT_SECONDS: per-request timeout (default: none)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    google: BackendCredentials | None = None
    openai: BackendCredentials | None = None
    deepseek: BackendCredentials | None = None
    mistral: BackendCredentials | None = None
    anthropic: BackendCredentials | None = None
    fallback: bool = False
    timeout: float | None = Field(default=None, gt=0)

    @property
    def registered(self) -> list[str]:
        """Backend names with a credentials section, in declaration order."""
        return [name for name in BACKENDS if getattr(self, name) is not None]

    def is_registered(self, name: str) -> bool:
        return name in BACKENDS and getattr(self, name) is not None

    def api_key(self, name: str) -> str | None:
        """Return the API key on file for ``name``, or None."""
        if not self.is_registered(name):
            return None
        return getattr(self, name).api_key

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "BackendRegistration":
        """Build from a plain mapping such as ``{"google": {"apiKey": "..."}}``."""
        return cls.model_validate(dict(config))

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> "BackendRegistration":
        """Build from environment variables, loading a .env file first.

        Args:
            dotenv_path: Optional explicit .env path. Defaults to searching
                from the current working directory.

        Returns:
            Registration with every backend whose key variable is set.
        """
        load_dotenv(dotenv_path)

        config: dict[str, Any] = {}
        for name, env_key in ENV_KEYS.items():
            value = os.environ.get(env_key)
            if value:
                config[name] = {"api_key": value}

        config["fallback"] = os.environ.get("LLM_FALLBACK", "").strip().lower() in _TRUTHY

        timeout = os.environ.get("LLM_TIMEOUT_SECONDS")
        if timeout:
            message = f"LLM_TIMEOUT_SECONDS must be a positive number, got {timeout!r}"
            try:
                seconds = float(timeout)
            except ValueError as e:
                raise SDKError(message, CORE, ErrorCode.VALIDATION_ERROR) from e
            if not seconds > 0:
                raise SDKError(message, CORE, ErrorCode.VALIDATION_ERROR)
            config["timeout"] = seconds

        return cls.model_validate(config)
