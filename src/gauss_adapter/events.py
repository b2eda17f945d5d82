"""Events produced by a provider stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class OutputEvent:
    """Base for all streamed output events."""


@dataclass
class TextEvent(OutputEvent):
    """Assistant text delta."""

    text: str = ""


@dataclass
class ReasoningEvent(OutputEvent):
    """Delta from the provider's reasoning ("thinking") channel."""

    text: str = ""


@dataclass
class ToolCallEvent(OutputEvent):
    """A fully assembled tool call with parsed arguments."""

    id: str = ""
    name: str = ""
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass
class MalformedToolCallEvent(OutputEvent):
    """A tool call whose arguments never became a valid JSON object.

    Consumers can report it back to the model or skip it. ``arguments_text``
    is the raw buffer exactly as received.
    """

    index: int = 0
    id: str | None = None
    name: str | None = None
    arguments_text: str = ""
    reason: str = ""


@dataclass
class UsageEvent(OutputEvent):
    """Token accounting for the request."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_write_tokens: int = 0
