"""Request parameter policy.

Each setting is resolved by its own function so the fallback order stays
visible and testable. ``None`` always means "leave the key out of the
request and let the provider decide".
"""

from __future__ import annotations

from dataclasses import dataclass

from gauss_adapter.config import OPENAI_MODEL_INFO_SANE_DEFAULTS, ModelInfo


@dataclass(frozen=True)
class RequestParameters:
    """Sampling parameters derived once per request."""

    temperature: float | None = None
    max_tokens: int | None = None
    reasoning_effort: str | None = None

    def as_request_kwargs(self) -> dict:
        """Keyword arguments for ``chat.completions.create``, omitting unset values."""
        kwargs = {}
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        if self.max_tokens is not None:
            kwargs["max_tokens"] = self.max_tokens
        if self.reasoning_effort is not None:
            kwargs["reasoning_effort"] = self.reasoning_effort
        return kwargs


def resolve_temperature(model_info: ModelInfo | None) -> float | None:
    """Pick the temperature to send.

    1. Configured and nonzero: send it.
    2. Configured and exactly zero: send nothing. Zero means "provider
       default" here, not "deterministic".
    3. Not configured: the library default.
    """
    if model_info is not None and model_info.temperature is not None:
        value = float(model_info.temperature)
        return None if value == 0 else value
    return OPENAI_MODEL_INFO_SANE_DEFAULTS.temperature


def resolve_max_tokens(model_info: ModelInfo | None) -> int | None:
    """Send ``max_tokens`` only when it is above zero; -1 means unlimited."""
    if model_info is None or model_info.max_tokens is None:
        return None
    value = model_info.max_tokens
    if value <= 0:
        return None
    return int(value)


def resolve_reasoning_effort(
    model_info: ModelInfo | None, reasoning_effort: str | None
) -> str | None:
    """Send the configured effort only to models that declare support for it."""
    if model_info is None or not model_info.supports_reasoning_effort:
        return None
    return reasoning_effort or None


def build_request_parameters(
    model_info: ModelInfo | None, reasoning_effort: str | None = None
) -> RequestParameters:
    return RequestParameters(
        temperature=resolve_temperature(model_info),
        max_tokens=resolve_max_tokens(model_info),
        reasoning_effort=resolve_reasoning_effort(model_info, reasoning_effort),
    )
