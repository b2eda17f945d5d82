"""Model metadata and provider constants."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DEFAULT_BASE_URL = "https://api.gauss.ai/v1"
CLIENT_KEY_HEADER = "X-Client-Key"

API_KEY_ENV = "GAUSS_API_KEY"
CLIENT_KEY_ENV = "GAUSS_CLIENT_KEY"
BASE_URL_ENV = "GAUSS_BASE_URL"


class ModelInfo(BaseModel):
    """Capabilities and pricing for a single model.

    Persisted provider settings use camelCase keys (``maxTokens``,
    ``supportsReasoningEffort``); both spellings are accepted.

    Example:
        info = ModelInfo.model_validate(
            {"maxTokens": 8192, "supportsReasoningEffort": True}
        )
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    max_tokens: int | None = None
    context_window: int | None = None
    supports_images: bool | None = None
    supports_prompt_cache: bool = False
    supports_reasoning_effort: bool = False
    temperature: float | None = None
    input_price: float | None = None
    output_price: float | None = None
    cache_reads_price: float | None = None
    cache_writes_price: float | None = None
    description: str | None = None


OPENAI_MODEL_INFO_SANE_DEFAULTS = ModelInfo(
    max_tokens=-1,
    context_window=128_000,
    supports_images=True,
    supports_prompt_cache=False,
    input_price=0,
    output_price=0,
    temperature=0,
)
