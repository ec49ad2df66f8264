"""Fallback engine: retry a failed non-streaming request on other backends.

Candidates are tried one at a time, in a fixed priority order, each with a
fixed substitute model. Attempts are never issued in parallel so a single
logical request is billed at most once per backend.
"""

import logging
import time

from .config import FALLBACK_MODELS, FALLBACK_ORDER, BackendRegistration
from .dispatcher import Dispatcher
from .errors import CORE, ErrorCode, SDKError
from .models import GenerateRequest, Output, ProviderParams

logger = logging.getLogger(__name__)


class FallbackEngine:
    """Re-issue a failed request against the remaining registered backends."""

    def __init__(self, registration: BackendRegistration, dispatcher: Dispatcher):
        self._registration = registration
        self._dispatcher = dispatcher

    def candidates(self, failed_provider: str) -> list[str]:
        """Registered fallback targets, in priority order, minus the failed one."""
        return [
            name
            for name in FALLBACK_ORDER
            if name != failed_provider and self._registration.is_registered(name)
        ]

    @staticmethod
    def rewrite(request: GenerateRequest, target: str) -> GenerateRequest:
        """Build a request for ``target`` from the original's shared fields."""
        selected = request.selected
        if selected is None:
            raise SDKError(
                "Cannot fall back: original request has no single provider",
                CORE,
                ErrorCode.FALLBACK_CONFIG_ERROR,
            )
        _, original = selected
        params = ProviderParams(
            model=FALLBACK_MODELS[target],
            prompt=original.prompt,
            system=original.system,
            temperature=original.temperature,
            max_tokens=original.max_tokens,
            raw=original.raw,
        )
        return GenerateRequest.for_provider(target, params)

    async def run(
        self,
        request: GenerateRequest,
        error: SDKError,
        correlation_id: str | None = None,
    ) -> Output:
        """Try each candidate in turn and return the first success.

        Args:
            request: The original (failed) request.
            error: The SDKError raised by the original backend.
            correlation_id: Tracking ID shared with the original attempt.

        Returns:
            Output from the first candidate that succeeds.

        Raises:
            SDKError: FALLBACK_CONFIG_ERROR when there is nothing to try,
                the last candidate's SDKError when every attempt failed, or
                FALLBACK_ALL_FAILED when no attempt produced an SDKError.
        """
        candidates = self.candidates(error.provider)
        if not candidates:
            raise SDKError(
                f"No fallback providers configured after {error.provider} failed",
                CORE,
                ErrorCode.FALLBACK_CONFIG_ERROR,
                correlation_id=correlation_id,
            ) from error

        last_error: SDKError | None = None

        for name in candidates:
            fallback_request = self.rewrite(request, name)
            provider = self._dispatcher.get_provider(name)
            api_key = self._registration.api_key(name) or ""
            start = time.perf_counter()

            try:
                output = await provider.invoke(fallback_request, api_key)
            except SDKError as e:
                last_error = e
                logger.warning(
                    "Fallback provider %s failed: %s",
                    name,
                    e.message,
                    extra={
                        "correlation_id": correlation_id,
                        "provider": name,
                        "error_code": e.code.value,
                    },
                )
                continue
            except Exception as e:
                logger.warning(
                    "Fallback provider %s raised unexpected %s: %s",
                    name,
                    type(e).__name__,
                    e,
                    extra={"correlation_id": correlation_id, "provider": name},
                )
                continue

            logger.info(
                "Fallback provider %s succeeded",
                name,
                extra={
                    "correlation_id": correlation_id,
                    "provider": name,
                    "model": output.model,
                    "latency_ms": int((time.perf_counter() - start) * 1000),
                },
            )
            return output

        # All candidates exhausted
        if last_error:
            raise last_error

        raise SDKError(
            "All fallback providers failed",
            CORE,
            ErrorCode.FALLBACK_ALL_FAILED,
            correlation_id=correlation_id,
        )
