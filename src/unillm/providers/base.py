"""Abstract base class for backend adapters.

Defines the capability interface every backend implements, and the shared
HTTP plumbing: one ``httpx.AsyncClient`` per call, error translation, and
the incremental stream loop.
"""

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

import httpx
from pydantic import ValidationError

from ..errors import ErrorCode, SDKError
from ..models import GenerateRequest, Output, ProviderParams, StreamEvent, Usage
from .streaming import DONE, SSEDecoder

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}

# Raised when a decoded payload is valid JSON but not the shape a backend documents
SHAPE_ERRORS = (AttributeError, TypeError, KeyError, IndexError, ValidationError)


class LLMProvider(ABC):
    """Base interface for backend adapters.

    Subclasses describe the wire format (``_build_request``,
    ``_extract_text``, ``_to_event``); this class owns the network calls.
    """

    SUPPORTED_FEATURES: frozenset[str] = frozenset({"streaming", "system_message", "raw"})

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the adapter.

        Args:
            timeout: Request timeout in seconds. None disables timeouts.
            transport: Optional httpx transport (tests use MockTransport).
        """
        self._timeout = timeout
        self._transport = transport

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier: 'google', 'openai', etc."""
        ...

    @property
    def display_name(self) -> str:
        """Human-readable backend name for error messages."""
        return self.name.capitalize()

    def supports(self, feature: str) -> bool:
        """Check if the backend supports a capability ('streaming', 'raw', ...)."""
        return feature in self.SUPPORTED_FEATURES

    @abstractmethod
    def _build_request(
        self, params: ProviderParams, api_key: str, stream: bool
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        """Return (url, headers, json body) for one call."""
        ...

    @abstractmethod
    def _extract_text(self, data: dict[str, Any]) -> str:
        """Pull the generated text out of a non-streaming payload."""
        ...

    def _to_event(self, payload: Any) -> StreamEvent | None:
        """Map one decoded stream unit to a StreamEvent (None to skip)."""
        raise NotImplementedError

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    def _params(self, request: GenerateRequest) -> ProviderParams:
        params = getattr(request, self.name, None)
        if params is None:
            raise SDKError(
                f"{self.name} provider config missing",
                self.name,
                ErrorCode.CONFIG_ERROR,
            )
        return params

    async def invoke(self, request: GenerateRequest, api_key: str) -> Output:
        """Send one non-streaming request and normalize the reply.

        Args:
            request: Request with this backend's section populated.
            api_key: Key for this backend.

        Returns:
            Output with ``raw`` set only when the request asked for it.

        Raises:
            SDKError: CONFIG_ERROR if the section is missing, API_ERROR on
                transport failure, non-2xx status or a malformed body.
        """
        params = self._params(request)
        url, headers, body = self._build_request(params, api_key, stream=False)
        start_time = time.perf_counter()

        async with self._client() as client:
            try:
                response = await client.post(url, headers=headers, json=body)
            except httpx.HTTPError as e:
                raise SDKError(
                    f"Failed to connect to {self.display_name}: {e}",
                    self.name,
                    ErrorCode.API_ERROR,
                ) from e

        if not response.is_success:
            raise self._status_error(response)

        try:
            data = response.json()
        except ValueError as e:
            raise SDKError(
                f"{self.display_name} returned a malformed body",
                self.name,
                ErrorCode.API_ERROR,
                status_code=response.status_code,
            ) from e

        if not isinstance(data, dict):
            raise SDKError(
                f"{self.display_name} returned an unexpected payload",
                self.name,
                ErrorCode.API_ERROR,
                status_code=response.status_code,
            )

        logger.debug(
            "%s responded in %dms",
            self.name,
            int((time.perf_counter() - start_time) * 1000),
            extra={"provider": self.name, "model": params.model},
        )

        try:
            return Output(
                data=self._extract_text(data),
                provider=self.name,
                model=params.model,
                raw=data if params.raw else None,
            )
        except SHAPE_ERRORS as e:
            raise SDKError(
                f"{self.display_name} returned a malformed body: {e}",
                self.name,
                ErrorCode.API_ERROR,
                status_code=response.status_code,
            ) from e

    async def invoke_stream(
        self, request: GenerateRequest, api_key: str
    ) -> AsyncIterator[StreamEvent]:
        """Open a streaming call and yield normalized events.

        The connection is held by ``async with`` and released when the
        stream finishes, fails, or the caller closes the iterator early.
        Every successful stream ends with exactly one ``done`` event.

        Raises:
            SDKError: CONFIG_ERROR if the section is missing, API_ERROR on
                connection failure, non-2xx status or an in-band error.
        """
        params = self._params(request)
        url, headers, body = self._build_request(params, api_key, stream=True)

        async with self._client() as client:
            try:
                async with client.stream("POST", url, headers=headers, json=body) as response:
                    if not response.is_success:
                        await response.aread()
                        raise self._status_error(response, streaming=True)

                    finished = False
                    async for unit in self._iter_units(response):
                        if unit is DONE:
                            break
                        try:
                            event = self._to_event(unit)
                        except SHAPE_ERRORS as e:
                            logger.debug(
                                "Skipping malformed %s stream unit: %s",
                                self.name,
                                e,
                                extra={"provider": self.name},
                            )
                            continue
                        if event is None:
                            continue
                        yield event
                        if event.done:
                            finished = True
                            break

                    if not finished:
                        yield StreamEvent(done=True, provider=self.name)

            except httpx.HTTPError as e:
                raise SDKError(
                    f"{self.display_name} streaming connection failed: {e}",
                    self.name,
                    ErrorCode.API_ERROR,
                ) from e

    async def _iter_units(self, response: httpx.Response) -> AsyncIterator[Any]:
        decoder = SSEDecoder()
        async for chunk in response.aiter_bytes():
            for unit in decoder.feed(chunk):
                yield unit
        for unit in decoder.flush():
            yield unit

    def _status_error(self, response: httpx.Response, streaming: bool = False) -> SDKError:
        """Convert a non-2xx response into an API_ERROR."""
        kind = "streaming error" if streaming else "error"
        return SDKError(
            f"{self.display_name} {kind} {response.status_code}: {self._error_message(response)}",
            self.name,
            ErrorCode.API_ERROR,
            status_code=response.status_code,
        )

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text[:200]

        if isinstance(data, list) and data:
            # Gemini sometimes wraps the envelope in a list
            data = data[0]
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if isinstance(error, str):
                return error
            for key in ("message", "detail"):
                if data.get(key):
                    return str(data[key])
        return response.text[:200]

    def _api_error(self, message: str) -> SDKError:
        """An in-band error reported inside a 2xx stream."""
        return SDKError(f"{self.display_name} error: {message}", self.name, ErrorCode.API_ERROR)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


def usage_from(data: Any, prompt_key: str, completion_key: str, total_key: str) -> Usage | None:
    """Build a Usage from a backend usage block, or None if absent."""
    if not isinstance(data, dict):
        return None
    prompt = data.get(prompt_key) or 0
    completion = data.get(completion_key) or 0
    total = data.get(total_key) or (prompt + completion)
    return Usage(prompt=prompt, completion=completion, total=total)
