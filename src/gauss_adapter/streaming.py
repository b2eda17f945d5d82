"""Streaming primitives for provider responses.

Providers deliver tool calls piecemeal: the id, the function name and the
JSON arguments of one call can be split over many chunks, and fragments of
parallel calls interleave, told apart only by their ``index``. The
:class:`ToolCallProcessor` reassembles them and emits a
:class:`~gauss_adapter.events.ToolCallEvent` as soon as a call's arguments
form a complete JSON object.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from gauss_adapter.events import (
    MalformedToolCallEvent,
    OutputEvent,
    ReasoningEvent,
    TextEvent,
    ToolCallEvent,
    UsageEvent,
)
from gauss_adapter.wire import ChunkUsage, CompletionChunk, ToolCallDelta

logger = logging.getLogger(__name__)


class _NonStandardConstant(ValueError):
    pass


def _reject_constant(name: str):
    raise _NonStandardConstant(name)


_decoder = json.JSONDecoder(parse_constant=_reject_constant)


@dataclass
class ToolCallFragment:
    """A fragment of a tool call from a streaming chunk."""

    index: int
    call_id: str | None = None
    name: str | None = None
    arguments_delta: str | None = None

    @classmethod
    def from_delta(cls, delta: ToolCallDelta) -> ToolCallFragment:
        function = delta.function
        return cls(
            index=delta.index,
            call_id=delta.id or None,
            name=(function.name or None) if function else None,
            arguments_delta=function.arguments if function else None,
        )


@dataclass
class PendingToolCall:
    """A tool call still being assembled.

    Argument deltas are kept as parts and joined only when the buffer is
    parsed. ``opens_object`` is ``None`` until the first non-whitespace
    character arrives; ``closes_object`` tracks whether the last one is
    ``}``.
    """

    call_id: str | None = None
    name: str | None = None
    parts: list[str] = field(default_factory=list)
    opens_object: bool | None = None
    closes_object: bool = False

    @property
    def arguments_text(self) -> str:
        if len(self.parts) > 1:
            self.parts = ["".join(self.parts)]
        return self.parts[0] if self.parts else ""

    def append_arguments(self, delta: str) -> None:
        self.parts.append(delta)
        if self.opens_object is None:
            head = delta.lstrip()
            if head:
                self.opens_object = head.startswith("{")
        tail = delta.rstrip()
        if tail:
            self.closes_object = tail.endswith("}")


class _ParseStatus(Enum):
    INCOMPLETE = "incomplete"
    COMPLETE = "complete"
    MALFORMED = "malformed"


def _parse_arguments(text: str) -> tuple[_ParseStatus, Any]:
    """Classify an arguments buffer.

    Returns the parsed object for COMPLETE and a reason string for
    MALFORMED. A buffer is MALFORMED only when no further input can
    turn it into a JSON object.
    """
    stripped = text.lstrip()
    if not stripped:
        return _ParseStatus.INCOMPLETE, None
    if not stripped.startswith("{"):
        return _ParseStatus.MALFORMED, "arguments must be a JSON object"
    try:
        value, end = _decoder.raw_decode(stripped)
    except _NonStandardConstant as e:
        return _ParseStatus.MALFORMED, f"non-standard JSON constant {e}"
    except json.JSONDecodeError:
        return _ParseStatus.INCOMPLETE, None
    if stripped[end:].strip():
        return _ParseStatus.MALFORMED, "unexpected data after JSON arguments"
    return _ParseStatus.COMPLETE, value


class ToolCallProcessor:
    """Assembles complete tool calls from streaming fragments.

    One instance serves one streamed response. Completed or malformed
    indices are finalized and never reopened; stray fragments for them
    are logged and dropped.
    """

    def __init__(self) -> None:
        self._pending: dict[int, PendingToolCall] = {}
        self._finalized: set[int] = set()

    @property
    def pending(self) -> dict[int, PendingToolCall]:
        return dict(self._pending)

    def process_tool_call_deltas(
        self, fragments: Iterable[ToolCallFragment | ToolCallDelta]
    ) -> Iterator[OutputEvent]:
        for fragment in fragments:
            if isinstance(fragment, ToolCallDelta):
                fragment = ToolCallFragment.from_delta(fragment)
            event = self._feed(fragment)
            if event is not None:
                yield event

    def finish(self) -> Iterator[OutputEvent]:
        """Resolve every call still pending once the stream has no more fragments.

        An empty buffer is a zero-argument call and completes with ``{}``.
        Anything else left over is reported as malformed, never guessed at.
        """
        for index in sorted(self._pending):
            record = self._pending[index]
            arguments: dict = {}
            if record.opens_object is not None:
                status, value = _parse_arguments(record.arguments_text)
                if status is _ParseStatus.INCOMPLETE:
                    yield self._malformed(
                        index, record, "incomplete JSON arguments at end of stream"
                    )
                    continue
                if status is _ParseStatus.MALFORMED:
                    yield self._malformed(index, record, value)
                    continue
                arguments = value

            if not record.call_id:
                yield self._malformed(index, record, "missing tool call id")
            elif not record.name:
                yield self._malformed(index, record, "missing tool call name")
            else:
                yield self._complete(index, record, arguments)

    def _feed(self, fragment: ToolCallFragment) -> OutputEvent | None:
        index = fragment.index
        if index in self._finalized:
            if (
                fragment.call_id
                or fragment.name
                or (fragment.arguments_delta or "").strip()
            ):
                logger.warning(
                    f"Dropping fragment for already finalized tool call index {index}"
                )
            return None

        record = self._pending.setdefault(index, PendingToolCall())
        if fragment.call_id and not record.call_id:
            record.call_id = fragment.call_id
        if fragment.name and not record.name:
            record.name = fragment.name
        if fragment.arguments_delta:
            record.append_arguments(fragment.arguments_delta)

        if record.opens_object is None:
            return None
        if not record.opens_object:
            return self._malformed(index, record, "arguments must be a JSON object")
        # A complete object ends in "}"; anything else cannot parse yet.
        if not record.closes_object:
            return None

        status, value = _parse_arguments(record.arguments_text)
        if status is _ParseStatus.MALFORMED:
            return self._malformed(index, record, value)
        if status is _ParseStatus.COMPLETE and record.call_id and record.name:
            return self._complete(index, record, value)
        return None

    def _complete(
        self, index: int, record: PendingToolCall, arguments: dict
    ) -> ToolCallEvent:
        self._finalize(index)
        return ToolCallEvent(id=record.call_id, name=record.name, arguments=arguments)

    def _malformed(
        self, index: int, record: PendingToolCall, reason: str
    ) -> MalformedToolCallEvent:
        logger.warning(f"Malformed tool call at index {index} ({record.name}): {reason}")
        self._finalize(index)
        return MalformedToolCallEvent(
            index=index,
            id=record.call_id,
            name=record.name,
            arguments_text=record.arguments_text,
            reason=reason,
        )

    def _finalize(self, index: int) -> None:
        self._pending.pop(index, None)
        self._finalized.add(index)


def usage_event(usage: ChunkUsage) -> UsageEvent:
    details = usage.prompt_tokens_details
    return UsageEvent(
        input_tokens=usage.prompt_tokens or 0,
        output_tokens=usage.completion_tokens or 0,
        cache_read_tokens=(details.cached_tokens if details else None) or 0,
        cache_write_tokens=usage.prompt_cache_miss_tokens or 0,
    )


def chunk_to_events(
    chunk: CompletionChunk, processor: ToolCallProcessor
) -> Iterator[OutputEvent]:
    """Translate one parsed chunk into output events.

    Every check runs independently, so one chunk can carry text,
    reasoning, tool calls and usage at the same time.
    """
    delta = chunk.delta
    if delta is not None:
        if delta.content:
            yield TextEvent(text=delta.content)
        if delta.reasoning_content:
            yield ReasoningEvent(text=delta.reasoning_content)
        if delta.tool_calls:
            yield from processor.process_tool_call_deltas(delta.tool_calls)

    if chunk.finish_reason is not None:
        yield from processor.finish()

    if chunk.usage is not None:
        yield usage_event(chunk.usage)
