"""Unit tests for the validation gates."""

import pytest

from unillm.config import BackendCredentials, BackendRegistration
from unillm.errors import ErrorCode, SDKError
from unillm.models import GenerateRequest, ProviderParams
from unillm.validation import validate_config, validate_provider

BACKENDS = ["google", "openai", "deepseek", "mistral", "anthropic"]


def params(model: str = "m", prompt: str = "p") -> ProviderParams:
    return ProviderParams(model=model, prompt=prompt)


class TestValidateProvider:
    """Tests for the exactly-one-backend rule."""

    def test_no_provider(self):
        """Test zero sections fails at core."""
        with pytest.raises(SDKError) as exc_info:
            validate_provider(GenerateRequest())
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
        assert exc_info.value.provider == "core"

    @pytest.mark.parametrize("pair", [("google", "openai"), ("deepseek", "mistral"), ("openai", "anthropic")])
    def test_two_providers(self, pair):
        """Test two sections fails at core."""
        request = GenerateRequest(**{name: params() for name in pair})
        with pytest.raises(SDKError) as exc_info:
            validate_provider(request)
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
        assert exc_info.value.provider == "core"

    def test_all_providers(self):
        """Test every section populated fails at core."""
        request = GenerateRequest(**{name: params() for name in BACKENDS})
        with pytest.raises(SDKError) as exc_info:
            validate_provider(request)
        assert exc_info.value.provider == "core"

    @pytest.mark.parametrize("name", BACKENDS)
    @pytest.mark.parametrize("model", ["", "   ", "\t\n"])
    def test_blank_model(self, name, model):
        """Test a blank model is scoped to the backend."""
        request = GenerateRequest.for_provider(name, params(model=model))
        with pytest.raises(SDKError) as exc_info:
            validate_provider(request)
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
        assert exc_info.value.provider == name
        assert "model" in exc_info.value.message

    @pytest.mark.parametrize("name", BACKENDS)
    def test_blank_prompt(self, name):
        """Test a blank prompt is scoped to the backend."""
        request = GenerateRequest.for_provider(name, params(prompt="  "))
        with pytest.raises(SDKError) as exc_info:
            validate_provider(request)
        assert exc_info.value.provider == name
        assert "prompt" in exc_info.value.message

    @pytest.mark.parametrize("name", BACKENDS)
    def test_valid_request(self, name):
        """Test a valid request returns the selected pair."""
        request = GenerateRequest.for_provider(name, params())
        selected_name, selected_params = validate_provider(request)
        assert selected_name == name
        assert selected_params.model == "m"

    def test_idempotent(self):
        """Test validation has no side effects and repeats identically."""
        request = GenerateRequest(google=params(model="gemini-2.5-flash", prompt="  hi  "))
        before = request.model_dump()

        first = validate_provider(request)
        second = validate_provider(request)

        assert first == second
        assert request.model_dump() == before
        assert request.google.prompt == "  hi  "

    def test_idempotent_failure(self):
        """Test a failing request fails the same way every time."""
        request = GenerateRequest(google=params(model=" "))
        errors = []
        for _ in range(3):
            with pytest.raises(SDKError) as exc_info:
                validate_provider(request)
            errors.append((exc_info.value.code, exc_info.value.provider, exc_info.value.message))
        assert len(set(errors)) == 1


class TestValidateConfig:
    """Tests for registration validation."""

    def test_none(self):
        """Test a missing registration fails at core."""
        with pytest.raises(SDKError) as exc_info:
            validate_config(None)
        assert exc_info.value.provider == "core"
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR

    def test_nothing_registered(self):
        """Test an empty registration fails at core."""
        with pytest.raises(SDKError) as exc_info:
            validate_config(BackendRegistration(fallback=True))
        assert exc_info.value.provider == "core"

    @pytest.mark.parametrize("name", BACKENDS)
    @pytest.mark.parametrize("key", ["", "   "])
    def test_blank_key(self, name, key):
        """Test a blank key is scoped to the backend."""
        registration = BackendRegistration(**{name: BackendCredentials(api_key=key)})
        with pytest.raises(SDKError) as exc_info:
            validate_config(registration)
        assert exc_info.value.provider == name
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR

    def test_blank_key_among_valid(self):
        """Test one blank key fails even when others are fine."""
        registration = BackendRegistration(
            google=BackendCredentials(api_key="g-key"),
            mistral=BackendCredentials(api_key=""),
        )
        with pytest.raises(SDKError) as exc_info:
            validate_config(registration)
        assert exc_info.value.provider == "mistral"

    def test_valid(self):
        """Test a valid registration passes."""
        registration = BackendRegistration(
            google=BackendCredentials(api_key="g-key"),
            anthropic=BackendCredentials(api_key="a-key"),
        )
        assert validate_config(registration) is None
        assert validate_config(registration) is None
