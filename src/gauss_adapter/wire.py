"""Parsed shape of one streamed chat-completion chunk.

Gauss extends the OpenAI chunk with ``reasoning_content`` on the delta and
``prompt_cache_miss_tokens`` on the usage block. Both are declared here as
optional fields so the stream loop reads them like any other attribute.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from gauss_adapter.errors import StreamProtocolError


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class FunctionDelta(_WireModel):
    name: str | None = None
    arguments: str | None = None


class ToolCallDelta(_WireModel):
    index: int
    id: str | None = None
    type: str | None = None
    function: FunctionDelta | None = None


class ChunkDelta(_WireModel):
    content: str | None = None
    reasoning_content: str | None = None
    tool_calls: list[ToolCallDelta] | None = None


class ChunkChoice(_WireModel):
    index: int = 0
    delta: ChunkDelta | None = None
    finish_reason: str | None = None


class PromptTokensDetails(_WireModel):
    cached_tokens: int | None = None


class ChunkUsage(_WireModel):
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    prompt_tokens_details: PromptTokensDetails | None = None
    prompt_cache_miss_tokens: int | None = None


class CompletionChunk(_WireModel):
    choices: list[ChunkChoice] = []
    usage: ChunkUsage | None = None

    @property
    def delta(self) -> ChunkDelta | None:
        """Delta of the first choice, if any."""
        if not self.choices:
            return None
        return self.choices[0].delta

    @property
    def finish_reason(self) -> str | None:
        if not self.choices:
            return None
        return self.choices[0].finish_reason


def parse_chunk(raw: Any) -> CompletionChunk:
    """Validate a raw chunk from the SDK (a pydantic object) or a plain dict."""
    if hasattr(raw, "model_dump"):
        raw = raw.model_dump()
    if not isinstance(raw, Mapping):
        raise StreamProtocolError(
            f"Unexpected chunk type from Gauss stream: {type(raw).__name__}"
        )
    try:
        return CompletionChunk.model_validate(raw)
    except ValidationError as e:
        raise StreamProtocolError(f"Malformed chunk from Gauss stream: {e}") from e
