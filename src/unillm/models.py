"""unillm data models.

Vendor-neutral request, output and stream event models. A request names
exactly one backend; every backend's reply is normalized into Output or a
sequence of StreamEvent.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProviderParams(BaseModel):
    """Parameters for a single backend call.

    model and prompt default to "" so that a missing value surfaces as a
    provider-scoped validation failure rather than a shape error.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    model: str = ""
    prompt: str = ""
    system: str | None = None
    temperature: float | None = None
    max_tokens: int | None = Field(default=None, ge=1, alias="maxTokens")
    raw: bool = False
    stream: bool = False


class GenerateRequest(BaseModel):
    """A request addressed to exactly one backend.

    Only one of the backend sections may be populated. Use ``selected`` for
    the tagged view of the populated section.
    """

    model_config = ConfigDict(extra="forbid")

    google: ProviderParams | None = None
    openai: ProviderParams | None = None
    deepseek: ProviderParams | None = None
    mistral: ProviderParams | None = None
    anthropic: ProviderParams | None = None

    @classmethod
    def for_provider(cls, name: str, params: ProviderParams) -> "GenerateRequest":
        """Build a request populated only for ``name``."""
        return cls(**{name: params})

    def populated(self) -> list[str]:
        """Names of the backend sections that are set, in field order."""
        return [name for name in type(self).model_fields if getattr(self, name) is not None]

    @property
    def selected(self) -> tuple[str, ProviderParams] | None:
        """(backend name, params) when exactly one section is set, else None."""
        names = self.populated()
        if len(names) != 1:
            return None
        return names[0], getattr(self, names[0])


class Usage(BaseModel):
    """Token usage statistics as reported by the backend."""

    prompt: int = 0
    completion: int = 0
    total: int = 0


class Output(BaseModel):
    """Normalized result of a non-streaming call."""

    model_config = ConfigDict(frozen=True)

    data: str
    provider: str
    model: str
    raw: Any | None = None


class StreamEvent(BaseModel):
    """One normalized unit of a streaming call."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    done: bool = False
    tokens: Usage | None = None
    raw: Any | None = None
    provider: str
