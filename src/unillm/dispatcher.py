"""Dispatcher: route a validated request to its backend adapter."""

import logging
from collections.abc import AsyncIterator

import httpx

from .config import BackendRegistration
from .errors import CORE, ErrorCode, SDKError
from .models import GenerateRequest, Output, StreamEvent
from .providers import PROVIDERS, LLMProvider
from .validation import validate_provider

logger = logging.getLogger(__name__)


class Dispatcher:
    """Selects the adapter for a request by name and invokes it.

    Adapters are looked up in a name -> adapter mapping built once from
    the provider registry. The registration decides which of them may be
    called.
    """

    def __init__(
        self,
        registration: BackendRegistration,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._registration = registration
        self._providers: dict[str, LLMProvider] = {
            name: cls(timeout=registration.timeout, transport=transport)
            for name, cls in PROVIDERS.items()
        }

    def get_provider(self, name: str) -> LLMProvider:
        """Get the adapter for ``name``.

        Raises:
            SDKError: CONFIG_ERROR if no adapter exists for the name.
        """
        if name not in self._providers:
            raise SDKError(
                f"Unknown provider: {name}. Available: {list(self._providers)}",
                CORE,
                ErrorCode.CONFIG_ERROR,
            )
        return self._providers[name]

    def _api_key(self, name: str) -> str:
        key = self._registration.api_key(name)
        if key is None:
            raise SDKError(
                f"{name} is not configured on this client",
                name,
                ErrorCode.CONFIG_ERROR,
            )
        return key

    async def dispatch(self, request: GenerateRequest) -> Output | AsyncIterator[StreamEvent]:
        """Invoke the selected backend.

        Returns:
            Output for non-streaming requests; the adapter's stream,
            unwrapped, when ``stream`` is set.

        Raises:
            SDKError: NO_PROVIDER, VALIDATION_ERROR, CONFIG_ERROR,
                STREAMING_NOT_SUPPORTED, or whatever the adapter raises.
        """
        if not request.populated():
            raise SDKError("No provider selected", CORE, ErrorCode.NO_PROVIDER)

        name, params = validate_provider(request)
        provider = self.get_provider(name)
        api_key = self._api_key(name)

        if params.stream:
            if not provider.supports("streaming"):
                raise SDKError(
                    f"Streaming is not supported for {name}",
                    name,
                    ErrorCode.STREAMING_NOT_SUPPORTED,
                )
            logger.debug(
                "Dispatching streaming request to %s",
                name,
                extra={"provider": name, "model": params.model},
            )
            return provider.invoke_stream(request, api_key)

        logger.debug(
            "Dispatching request to %s",
            name,
            extra={"provider": name, "model": params.model},
        )
        return await provider.invoke(request, api_key)
