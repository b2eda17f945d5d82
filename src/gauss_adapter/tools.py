import inspect
import json
from collections.abc import Mapping, Sequence
from typing import Any, Callable

from pydantic import BaseModel, Field

_JSON_TYPES = {
    'str': 'string',
    'int': 'integer',
    'float': 'number',
    'bool': 'boolean',
    'NoneType': 'null',
    'dict': 'object',
    'list': 'array',
    'tuple': 'array',
    'set': 'array',
}


def normalize_to_json_type(annotation: Any) -> str:
    if isinstance(annotation, str):
        name = annotation
    else:
        name = getattr(annotation, "__name__", None)
    return _JSON_TYPES.get(name, 'string')


class Tool(BaseModel):
    """Declaration of a function the model may call.

    Only the schema lives here; executing the call is up to the agent loop
    consuming the stream.
    """

    name: str
    description: str | None = None
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    @classmethod
    def from_function(cls, func: Callable) -> "Tool":
        """Derive a declaration from a function's signature and docstring."""
        signature = inspect.signature(func)
        properties = {}
        required = []
        for param_name, param in signature.parameters.items():
            properties[param_name] = {
                "type": normalize_to_json_type(param.annotation),
                "description": ""
            }
            if param.default is inspect.Parameter.empty:
                required.append(param_name)

        return cls(
            name=func.__name__,
            description=inspect.getdoc(func),
            parameters={
                "type": "object",
                "properties": properties,
                "required": required,
            },
        )

    def get_schema(self) -> dict:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            }
        }

    def model_dump(self, **kwargs):
        """Return the OpenAI tool schema instead of the model fields."""
        return self.get_schema()

    def model_dump_json(self, **kwargs):
        return json.dumps(self.get_schema())


def get_openai_tool_params(
    tools: Sequence["Tool | Mapping[str, Any]"] | None,
) -> dict:
    """Request kwargs for tool calling; empty when no tools are declared."""
    if not tools:
        return {}
    schemas = [
        t.model_dump() if isinstance(t, Tool) else dict(t)
        for t in tools
    ]
    return {"tools": schemas, "tool_choice": "auto"}
