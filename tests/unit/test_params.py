"""Unit tests for request parameter resolution."""

import math

import pytest
from pydantic import ValidationError

from gauss_adapter.config import ModelInfo
from gauss_adapter.params import (
    RequestParameters,
    build_request_parameters,
    resolve_max_tokens,
    resolve_reasoning_effort,
    resolve_temperature,
)


class TestTemperature:
    def test_nonzero_is_sent(self):
        assert resolve_temperature(ModelInfo(temperature=0.7)) == 0.7

    def test_zero_is_omitted(self):
        assert resolve_temperature(ModelInfo(temperature=0)) is None

    def test_unset_uses_library_default(self):
        assert resolve_temperature(ModelInfo()) == 0
        assert resolve_temperature(None) == 0


class TestMaxTokens:
    @pytest.mark.parametrize("value", [None, 0, -1])
    def test_not_sent(self, value):
        assert resolve_max_tokens(ModelInfo(max_tokens=value)) is None

    def test_positive_is_sent(self):
        assert resolve_max_tokens(ModelInfo(max_tokens=4096)) == 4096

    def test_no_model_info(self):
        assert resolve_max_tokens(None) is None

    def test_infinite_rejected_by_settings(self):
        with pytest.raises(ValidationError):
            ModelInfo(max_tokens=math.inf)

    def test_unlimited_from_camel_case_settings(self):
        info = ModelInfo.model_validate({"maxTokens": -1})
        assert resolve_max_tokens(info) is None


class TestReasoningEffort:
    def test_sent_when_supported(self):
        info = ModelInfo(supports_reasoning_effort=True)
        assert resolve_reasoning_effort(info, "high") == "high"

    def test_dropped_when_unsupported(self):
        assert resolve_reasoning_effort(ModelInfo(), "high") is None

    def test_empty_effort_dropped(self):
        info = ModelInfo(supports_reasoning_effort=True)
        assert resolve_reasoning_effort(info, "") is None


class TestRequestParameters:
    def test_as_request_kwargs_omits_unset(self):
        assert RequestParameters().as_request_kwargs() == {}
        assert RequestParameters(temperature=0.3).as_request_kwargs() == {
            "temperature": 0.3,
        }

    def test_build_from_camel_case_settings(self):
        info = ModelInfo.model_validate({
            "maxTokens": 8192,
            "temperature": 0.5,
            "supportsReasoningEffort": True,
        })

        params = build_request_parameters(info, "low")

        assert params == RequestParameters(
            temperature=0.5, max_tokens=8192, reasoning_effort="low",
        )

    def test_build_without_model_info(self):
        assert build_request_parameters(None, "high").as_request_kwargs() == {
            "temperature": 0.0,
        }
