import json
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, field_serializer

from gauss_adapter.events import ToolCallEvent


class MessageRole(Enum):
    SYSTEM = "system"
    ASSISTANT = "assistant"
    USER = "user"
    TOOL = "tool"


class Message(BaseModel):
    role: MessageRole
    content: str

    @field_serializer('role')
    def serialize_role(self, role: MessageRole, _info) -> str:
        return role.value


class ToolCallRequestMessage(Message):
    """Assistant turn that asked for one or more tool calls."""

    role: MessageRole = MessageRole.ASSISTANT
    content: str = ""
    tool_calls: list[ToolCallEvent]

    @field_serializer("tool_calls")
    def serialize_tool_calls(self, tool_calls: list[ToolCallEvent]) -> list[dict]:
        return [
            {
                "id": t.id,
                "type": "function",
                "function": {
                    "arguments": json.dumps(t.arguments),
                    "name": t.name
                }
            }
            for t in tool_calls
        ]


class ToolCallResultMessage(Message):
    role: MessageRole = MessageRole.TOOL
    tool_call_id: str


def to_openai_messages(
    system_prompt: str,
    messages: Sequence[Message | Mapping[str, Any]],
) -> list[dict]:
    """Build the provider message list: system prompt first, then history.

    Stored messages are dumped through their serializers; plain dicts are
    assumed to be in wire format already and pass through.
    """
    converted = [{"role": MessageRole.SYSTEM.value, "content": system_prompt}]
    for m in messages:
        if isinstance(m, BaseModel):
            converted.append(m.model_dump())
        else:
            converted.append(dict(m))
    return converted
