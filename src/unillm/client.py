"""High-level client with validation, dispatch and fallback.

``LLMClient.generate`` is the single entry point: one request shape in,
one normalized Output (or a stream of StreamEvent) out, and every failure
surfaced as an SDKError.
"""

import logging
import uuid
from collections.abc import AsyncIterator, Mapping
from typing import Any

import httpx
from pydantic import ValidationError

from .config import BackendRegistration
from .dispatcher import Dispatcher
from .errors import CORE, ErrorCode, SDKError, is_fallback_eligible
from .fallback import FallbackEngine
from .models import GenerateRequest, Output, StreamEvent
from .validation import validate_config, validate_provider

logger = logging.getLogger(__name__)


def _validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


class LLMClient:
    """Unified client over the registered backends.

    Features:
    - Exactly-one-backend request validation before any network call
    - Adapter selection by backend name
    - Sequential fallback to other registered backends (non-streaming only)
    - Correlation ID tracking across fallback attempts

    The registration is validated once here and never changes afterwards.
    """

    def __init__(
        self,
        registration: BackendRegistration | Mapping[str, Any] | None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            registration: Backend keys plus the fallback flag, either as a
                BackendRegistration or a plain mapping such as
                ``{"google": {"apiKey": "..."}, "fallback": True}``.
            transport: Optional httpx transport shared by all adapters.

        Raises:
            SDKError: VALIDATION_ERROR if no backend is registered or a
                registered key is blank.
        """
        self._registration = self._coerce_registration(registration)
        validate_config(self._registration)

        self._dispatcher = Dispatcher(self._registration, transport=transport)
        self._fallback = FallbackEngine(self._registration, self._dispatcher)

        logger.debug(
            "LLM client initialized: %s (fallback=%s)",
            ", ".join(self._registration.registered),
            self._registration.fallback,
        )

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> "LLMClient":
        """Build a client from environment variables (and a .env file)."""
        return cls(BackendRegistration.from_env(dotenv_path))

    @property
    def registration(self) -> BackendRegistration:
        return self._registration

    @property
    def fallback_enabled(self) -> bool:
        return self._registration.fallback

    @staticmethod
    def _coerce_registration(
        registration: BackendRegistration | Mapping[str, Any] | None,
    ) -> BackendRegistration | None:
        if registration is None or isinstance(registration, BackendRegistration):
            return registration
        try:
            return BackendRegistration.from_mapping(registration)
        except ValidationError as e:
            raise SDKError(
                f"Invalid configuration: {_validation_message(e)}",
                CORE,
                ErrorCode.VALIDATION_ERROR,
            ) from e

    @staticmethod
    def _coerce_request(request: GenerateRequest | Mapping[str, Any]) -> GenerateRequest:
        if isinstance(request, GenerateRequest):
            return request
        try:
            return GenerateRequest.model_validate(dict(request))
        except (ValidationError, TypeError, ValueError) as e:
            message = _validation_message(e) if isinstance(e, ValidationError) else str(e)
            raise SDKError(
                f"Invalid request: {message}",
                CORE,
                ErrorCode.VALIDATION_ERROR,
            ) from e

    async def generate(
        self,
        request: GenerateRequest | Mapping[str, Any],
        correlation_id: str | None = None,
    ) -> Output | AsyncIterator[StreamEvent]:
        """Generate a completion from the selected backend.

        Args:
            request: Request with exactly one backend section populated.
            correlation_id: Optional ID for tracking across fallback attempts.

        Returns:
            Output for non-streaming requests, or an async iterator of
            StreamEvent when the selected section sets ``stream``.

        Raises:
            SDKError: Every failure, including unexpected ones, which are
                wrapped as UNEXPECTED_ERROR.
        """
        correlation_id = correlation_id or str(uuid.uuid4())

        try:
            request = self._coerce_request(request)
            name, params = validate_provider(request)
        except SDKError as e:
            e.correlation_id = correlation_id
            raise

        try:
            result = await self._dispatcher.dispatch(request)

        except SDKError as e:
            e.correlation_id = correlation_id
            if params.stream or not self._registration.fallback or not is_fallback_eligible(e):
                logger.error(
                    "Provider %s failed: %s",
                    e.provider,
                    e.message,
                    extra={
                        "correlation_id": correlation_id,
                        "provider": e.provider,
                        "error_code": e.code.value,
                    },
                )
                raise

            logger.warning(
                "Provider %s failed with %s: %s. Trying fallback.",
                e.provider,
                e.code.value,
                e.message,
                extra={
                    "correlation_id": correlation_id,
                    "provider": e.provider,
                    "error_code": e.code.value,
                },
            )
            return await self._run_fallback(request, e, correlation_id)

        except Exception as e:
            raise self._unexpected(e, correlation_id) from e

        if params.stream:
            return self._guard_stream(result, correlation_id)

        logger.info(
            "LLM request succeeded",
            extra={
                "correlation_id": correlation_id,
                "provider": result.provider,
                "model": result.model,
            },
        )
        return result

    async def _run_fallback(
        self, request: GenerateRequest, error: SDKError, correlation_id: str
    ) -> Output:
        try:
            return await self._fallback.run(request, error, correlation_id=correlation_id)
        except SDKError as e:
            e.correlation_id = correlation_id
            logger.error(
                "Fallback exhausted: %s",
                e.message,
                extra={
                    "correlation_id": correlation_id,
                    "provider": e.provider,
                    "error_code": e.code.value,
                },
            )
            raise
        except Exception as e:
            raise self._unexpected(e, correlation_id) from e

    async def _guard_stream(
        self, stream: AsyncIterator[StreamEvent], correlation_id: str
    ) -> AsyncIterator[StreamEvent]:
        """Re-raise stream failures as SDKError and always close the source."""
        try:
            async for event in stream:
                yield event
        except SDKError as e:
            e.correlation_id = correlation_id
            logger.error(
                "Stream from %s failed: %s",
                e.provider,
                e.message,
                extra={
                    "correlation_id": correlation_id,
                    "provider": e.provider,
                    "error_code": e.code.value,
                },
            )
            raise
        except Exception as e:
            raise self._unexpected(e, correlation_id) from e
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

    @staticmethod
    def _unexpected(error: Exception, correlation_id: str) -> SDKError:
        logger.exception(
            "Unexpected error during dispatch",
            extra={"correlation_id": correlation_id},
        )
        return SDKError(
            f"Unexpected error: {error}",
            CORE,
            ErrorCode.UNEXPECTED_ERROR,
            correlation_id=correlation_id,
        )


# Convenience functions for module-level access
_default_client: LLMClient | None = None


def get_client() -> LLMClient:
    """Get the default client singleton, configured from the environment."""
    global _default_client
    if _default_client is None:
        _default_client = LLMClient.from_env()
    return _default_client


async def generate(
    request: GenerateRequest | Mapping[str, Any],
    correlation_id: str | None = None,
) -> Output | AsyncIterator[StreamEvent]:
    """Generate a completion using the default client."""
    return await get_client().generate(request, correlation_id=correlation_id)
