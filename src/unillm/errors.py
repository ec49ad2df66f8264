"""Error model for unillm.

Every failure surfaced to callers is an SDKError carrying the provider that
failed (or "core" for dispatch/validation failures) and a stable code.
The fallback engine reads both to decide whether, and where, to retry.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Stable machine-readable error categories."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"
    API_ERROR = "API_ERROR"
    STREAMING_NOT_SUPPORTED = "STREAMING_NOT_SUPPORTED"
    NO_PROVIDER = "NO_PROVIDER"
    FALLBACK_CONFIG_ERROR = "FALLBACK_CONFIG_ERROR"
    FALLBACK_ALL_FAILED = "FALLBACK_ALL_FAILED"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


CORE = "core"


class SDKError(Exception):
    """The single error kind raised by unillm."""

    def __init__(
        self,
        message: str,
        provider: str = CORE,
        code: ErrorCode | str = ErrorCode.UNEXPECTED_ERROR,
        status_code: int | None = None,
        correlation_id: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.code = ErrorCode(code)
        self.status_code = status_code
        self.correlation_id = correlation_id

    def __str__(self) -> str:
        parts = [super().__str__(), f"provider={self.provider}", f"code={self.code.value}"]
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"SDKError(message={self.message!r}, provider={self.provider!r}, "
            f"code={self.code.value!r})"
        )


# Error classification for fallback logic
FALLBACK_ELIGIBLE_CODES = frozenset({ErrorCode.API_ERROR})
NON_RETRYABLE_CODES = frozenset({
    ErrorCode.VALIDATION_ERROR,
    ErrorCode.CONFIG_ERROR,
    ErrorCode.STREAMING_NOT_SUPPORTED,
    ErrorCode.NO_PROVIDER,
    ErrorCode.FALLBACK_CONFIG_ERROR,
    ErrorCode.FALLBACK_ALL_FAILED,
    ErrorCode.UNEXPECTED_ERROR,
})


def is_fallback_eligible(error: BaseException) -> bool:
    """Return True if a failed non-streaming call may be retried elsewhere."""
    return isinstance(error, SDKError) and error.code in FALLBACK_ELIGIBLE_CODES
