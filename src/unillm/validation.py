"""Pure validation gates run before any network activity."""

from .config import BackendRegistration
from .errors import CORE, ErrorCode, SDKError
from .models import GenerateRequest, ProviderParams


def validate_config(registration: BackendRegistration | None) -> None:
    """Check that at least one backend is registered and every key is usable.

    Raises:
        SDKError: VALIDATION_ERROR scoped to "core" when nothing is
            registered, or to the backend whose key is blank.
    """
    if registration is None or not registration.registered:
        raise SDKError("no providers configured", CORE, ErrorCode.VALIDATION_ERROR)

    for name in registration.registered:
        key = registration.api_key(name)
        if not isinstance(key, str) or not key.strip():
            raise SDKError(f"{name}.apiKey is required", name, ErrorCode.VALIDATION_ERROR)


def validate_provider(request: GenerateRequest) -> tuple[str, ProviderParams]:
    """Check the exactly-one-backend rule and the selected backend's fields.

    Returns:
        The selected (backend name, params) pair.

    Raises:
        SDKError: VALIDATION_ERROR scoped to "core" for zero or several
            sections, or to the backend when model or prompt is blank.
    """
    names = request.populated()
    if not names:
        raise SDKError("No provider passed", CORE, ErrorCode.VALIDATION_ERROR)
    if len(names) > 1:
        raise SDKError(
            f"Pass only one provider (got {', '.join(names)})",
            CORE,
            ErrorCode.VALIDATION_ERROR,
        )

    name = names[0]
    params: ProviderParams = getattr(request, name)
    if not params.model.strip():
        raise SDKError(f"{name}.model is required", name, ErrorCode.VALIDATION_ERROR)
    if not params.prompt.strip():
        raise SDKError(f"{name}.prompt is required", name, ErrorCode.VALIDATION_ERROR)

    return name, params
