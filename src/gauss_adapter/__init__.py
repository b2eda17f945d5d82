from gauss_adapter.config import (
    DEFAULT_BASE_URL,
    OPENAI_MODEL_INFO_SANE_DEFAULTS,
    ModelInfo,
)
from gauss_adapter.errors import (
    ClientConstructionError,
    ConfigurationError,
    GaussError,
    StreamProtocolError,
    StreamTransportError,
)
from gauss_adapter.events import (
    MalformedToolCallEvent,
    OutputEvent,
    ReasoningEvent,
    TextEvent,
    ToolCallEvent,
    UsageEvent,
)
from gauss_adapter.instrumentation import instrument, uninstrument
from gauss_adapter.message import (
    Message,
    MessageRole,
    ToolCallRequestMessage,
    ToolCallResultMessage,
    to_openai_messages,
)
from gauss_adapter.params import RequestParameters, build_request_parameters
from gauss_adapter.provider import GaussProvider, ModelProvider
from gauss_adapter.retry import RetryPolicy
from gauss_adapter.streaming import ToolCallFragment, ToolCallProcessor
from gauss_adapter.tools import Tool, get_openai_tool_params

__all__ = [
    "ClientConstructionError",
    "ConfigurationError",
    "DEFAULT_BASE_URL",
    "GaussError",
    "GaussProvider",
    "MalformedToolCallEvent",
    "Message",
    "MessageRole",
    "ModelInfo",
    "ModelProvider",
    "OPENAI_MODEL_INFO_SANE_DEFAULTS",
    "OutputEvent",
    "ReasoningEvent",
    "RequestParameters",
    "RetryPolicy",
    "StreamProtocolError",
    "StreamTransportError",
    "TextEvent",
    "Tool",
    "ToolCallEvent",
    "ToolCallFragment",
    "ToolCallProcessor",
    "ToolCallRequestMessage",
    "ToolCallResultMessage",
    "UsageEvent",
    "build_request_parameters",
    "get_openai_tool_params",
    "instrument",
    "to_openai_messages",
    "uninstrument",
]
