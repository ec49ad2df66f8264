"""Unit tests for data models and the error model.

Tests cover:
- Request shape and the tagged (name, params) view
- Output and StreamEvent normalization
- SDKError attributes, rendering and fallback classification
"""

import pytest
from pydantic import ValidationError

from unillm.errors import (
    FALLBACK_ELIGIBLE_CODES,
    NON_RETRYABLE_CODES,
    ErrorCode,
    SDKError,
    is_fallback_eligible,
)
from unillm.models import GenerateRequest, Output, ProviderParams, StreamEvent, Usage


class TestProviderParams:
    """Tests for ProviderParams model."""

    def test_defaults(self):
        """Test optional fields default to unset."""
        params = ProviderParams(model="gemini-2.5-flash", prompt="Hi")
        assert params.system is None
        assert params.temperature is None
        assert params.max_tokens is None
        assert params.raw is False
        assert params.stream is False

    def test_max_tokens_alias(self):
        """Test maxTokens is accepted as an alias."""
        params = ProviderParams.model_validate({"model": "m", "prompt": "p", "maxTokens": 200})
        assert params.max_tokens == 200

    def test_max_tokens_must_be_positive(self):
        """Test maxTokens below 1 is rejected."""
        with pytest.raises(ValidationError):
            ProviderParams(model="m", prompt="p", max_tokens=0)

    def test_missing_model_defaults_blank(self):
        """Test a missing model is left blank for the validator to report."""
        params = ProviderParams.model_validate({"prompt": "p"})
        assert params.model == ""

    def test_unknown_field_rejected(self):
        """Test unexpected parameters are rejected."""
        with pytest.raises(ValidationError):
            ProviderParams.model_validate({"model": "m", "prompt": "p", "top_k": 3})


class TestGenerateRequest:
    """Tests for GenerateRequest model."""

    def test_for_provider(self):
        """Test building a request for a single backend."""
        request = GenerateRequest.for_provider("mistral", ProviderParams(model="m", prompt="p"))
        assert request.mistral is not None
        assert request.populated() == ["mistral"]

    def test_selected_single(self):
        """Test selected returns the populated section."""
        params = ProviderParams(model="m", prompt="p")
        request = GenerateRequest(openai=params)
        assert request.selected == ("openai", params)

    def test_selected_none_when_empty(self):
        """Test selected is None when nothing is populated."""
        assert GenerateRequest().selected is None

    def test_selected_none_when_multiple(self):
        """Test selected is None when several sections are populated."""
        params = ProviderParams(model="m", prompt="p")
        request = GenerateRequest(google=params, openai=params)
        assert request.selected is None
        assert request.populated() == ["google", "openai"]

    def test_unknown_backend_rejected(self):
        """Test an unknown backend key is a shape error."""
        with pytest.raises(ValidationError):
            GenerateRequest.model_validate({"cohere": {"model": "m", "prompt": "p"}})


class TestOutput:
    """Tests for Output model."""

    def test_output_without_raw(self):
        """Test raw is absent unless set."""
        output = Output(data="hi", provider="google", model="gemini-2.5-flash")
        assert output.raw is None
        assert "raw" not in output.model_dump(exclude_none=True)

    def test_output_is_frozen(self):
        """Test outputs cannot be mutated."""
        output = Output(data="hi", provider="google", model="m")
        with pytest.raises(ValidationError):
            output.data = "changed"


class TestStreamEvent:
    """Tests for StreamEvent model."""

    def test_defaults(self):
        """Test event defaults."""
        event = StreamEvent(provider="openai")
        assert event.text == ""
        assert event.done is False
        assert event.tokens is None
        assert event.raw is None

    def test_with_tokens(self):
        """Test token usage on an event."""
        event = StreamEvent(
            text="",
            done=True,
            tokens=Usage(prompt=10, completion=5, total=15),
            provider="mistral",
        )
        assert event.tokens.total == 15


class TestSDKError:
    """Tests for SDKError."""

    def test_attributes(self):
        """Test error carries message, provider and code."""
        error = SDKError("boom", "google", ErrorCode.API_ERROR, status_code=503)
        assert error.message == "boom"
        assert error.provider == "google"
        assert error.code == ErrorCode.API_ERROR
        assert error.status_code == 503
        assert error.correlation_id is None

    def test_defaults_to_core(self):
        """Test provider defaults to core."""
        error = SDKError("boom")
        assert error.provider == "core"
        assert error.code == ErrorCode.UNEXPECTED_ERROR

    def test_code_from_string(self):
        """Test codes may be passed as strings."""
        error = SDKError("bad", "core", "VALIDATION_ERROR")
        assert error.code is ErrorCode.VALIDATION_ERROR

    def test_str_includes_context(self):
        """Test string rendering includes provider and code."""
        error = SDKError("Gemini error 500: down", "google", ErrorCode.API_ERROR, status_code=500)
        rendered = str(error)
        assert "Gemini error 500: down" in rendered
        assert "provider=google" in rendered
        assert "code=API_ERROR" in rendered
        assert "status=500" in rendered

    def test_error_code_is_string_enum(self):
        """Test codes compare equal to their string values."""
        assert ErrorCode.NO_PROVIDER == "NO_PROVIDER"


class TestErrorClassification:
    """Tests for fallback classification."""

    def test_api_error_is_eligible(self):
        """Test API errors may fall back."""
        assert is_fallback_eligible(SDKError("x", "google", ErrorCode.API_ERROR))

    @pytest.mark.parametrize("code", sorted(NON_RETRYABLE_CODES, key=lambda c: c.value))
    def test_non_retryable_codes(self, code):
        """Test every other code never falls back."""
        assert not is_fallback_eligible(SDKError("x", "google", code))

    def test_plain_exception_not_eligible(self):
        """Test non-SDK exceptions never fall back."""
        assert not is_fallback_eligible(RuntimeError("x"))

    def test_classification_is_exhaustive(self):
        """Test every code is classified exactly once."""
        assert FALLBACK_ELIGIBLE_CODES | NON_RETRYABLE_CODES == set(ErrorCode)
        assert not FALLBACK_ELIGIBLE_CODES & NON_RETRYABLE_CODES
