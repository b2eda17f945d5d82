import logging
import os
import time
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import aclosing
from email.utils import parsedate_to_datetime
from typing import Any

import httpx
import openai
from openai import AsyncOpenAI

from gauss_adapter.config import (
    API_KEY_ENV,
    BASE_URL_ENV,
    CLIENT_KEY_ENV,
    CLIENT_KEY_HEADER,
    DEFAULT_BASE_URL,
    OPENAI_MODEL_INFO_SANE_DEFAULTS,
    ModelInfo,
)
from gauss_adapter.errors import (
    ClientConstructionError,
    ConfigurationError,
    GaussError,
    StreamTransportError,
)
from gauss_adapter.events import OutputEvent, UsageEvent
from gauss_adapter.instrumentation import (
    completion_span,
    record_error,
    record_request,
    record_usage,
)
from gauss_adapter.message import Message, to_openai_messages
from gauss_adapter.params import build_request_parameters
from gauss_adapter.retry import RetryPolicy
from gauss_adapter.streaming import ToolCallProcessor, chunk_to_events
from gauss_adapter.tools import Tool, get_openai_tool_params
from gauss_adapter.wire import parse_chunk

logger = logging.getLogger(__name__)


class ModelProvider(ABC):
    """Interface for streaming chat providers."""

    @abstractmethod
    def create_message(
            self,
            system_prompt: str,
            messages: Sequence[Message | Mapping[str, Any]],
            tools: Sequence[Tool | Mapping[str, Any]] | None = None,
    ) -> AsyncIterator[OutputEvent]:
        ...

    @abstractmethod
    def get_model(self) -> tuple[str, ModelInfo]:
        ...


class GaussProvider(ModelProvider):
    """Streams chat completions from Gauss as :class:`OutputEvent` objects.

    Gauss speaks the OpenAI chat-completions protocol and additionally
    requires a client key, sent as the ``X-Client-Key`` header. Credentials
    not passed explicitly are read from ``GAUSS_API_KEY`` and
    ``GAUSS_CLIENT_KEY``.

    The client is built lazily on the first request so a missing credential
    surfaces as a :class:`ConfigurationError` before any network activity.

    Args:
        api_key: Gauss API key.
        client_key: Gauss client key.
        base_url: API endpoint, defaults to ``https://api.gauss.ai/v1``.
        model_id: Model to request.
        model_info: Capabilities of that model; drives temperature,
            max tokens and reasoning effort.
        reasoning_effort: Effort level, only sent to models that support it.
        retry_policy: Backoff applied around stream creation.
        http_client: Preconfigured ``httpx.AsyncClient`` (proxies, custom
            transports).
    """

    system = "gauss"

    def __init__(
            self,
            api_key: str | None = None,
            client_key: str | None = None,
            base_url: str | None = None,
            model_id: str | None = None,
            model_info: ModelInfo | None = None,
            reasoning_effort: str | None = None,
            retry_policy: RetryPolicy | None = None,
            http_client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key or os.getenv(API_KEY_ENV)
        self.client_key = client_key or os.getenv(CLIENT_KEY_ENV)
        self.base_url = base_url or os.getenv(BASE_URL_ENV) or DEFAULT_BASE_URL
        self.model_id = model_id
        self.model_info = model_info
        self.reasoning_effort = reasoning_effort
        self.retry_policy = retry_policy or RetryPolicy()
        self.http_client = http_client
        self.client: AsyncOpenAI | None = None

    def ensure_client(self) -> AsyncOpenAI:
        if self.client is None:
            if not self.api_key:
                raise ConfigurationError(
                    "Gauss API key is required", field="api_key"
                )
            if not self.client_key:
                raise ConfigurationError(
                    "Gauss Client key is required", field="client_key"
                )
            try:
                # Retries belong to the retry policy, not the SDK.
                self.client = AsyncOpenAI(
                    base_url=self.base_url,
                    api_key=self.api_key,
                    default_headers={CLIENT_KEY_HEADER: self.client_key},
                    http_client=self.http_client,
                    max_retries=0,
                )
            except Exception as e:
                raise ClientConstructionError(
                    f"Error creating Gauss client: {e}"
                ) from e
        return self.client

    def create_message(
            self,
            system_prompt: str,
            messages: Sequence[Message | Mapping[str, Any]],
            tools: Sequence[Tool | Mapping[str, Any]] | None = None,
    ) -> AsyncIterator[OutputEvent]:
        """Stream one completion.

        Yields text, reasoning, tool-call and usage events in arrival order;
        tool calls are yielded once their arguments are complete. The
        iterator simply ends when the provider stream is exhausted.
        """
        return self.retry_policy.stream(
            lambda: self._create_message(system_prompt, messages, tools)
        )

    def get_model(self) -> tuple[str, ModelInfo]:
        return (
            self.model_id or "",
            self.model_info or OPENAI_MODEL_INFO_SANE_DEFAULTS,
        )

    async def _create_message(self, system_prompt, messages, tools):
        client = self.ensure_client()
        model_id = self.model_id or ""
        params = build_request_parameters(self.model_info, self.reasoning_effort)

        request = {
            "model": model_id,
            "messages": to_openai_messages(system_prompt, messages),
            **params.as_request_kwargs(),
            "stream": True,
            "stream_options": {"include_usage": True},
            **get_openai_tool_params(tools),
        }
        logger.debug(
            f"Creating Gauss stream for {model_id!r} with "
            f"{len(request['messages'])} message(s)"
        )

        async with completion_span(self.system, model_id) as span:
            record_request(span, params)
            try:
                async with aclosing(self._stream_events(client, request)) as events:
                    async for event in events:
                        if isinstance(event, UsageEvent):
                            record_usage(span, event)
                        yield event
            except GaussError as e:
                record_error(span, e)
                raise

    async def _stream_events(self, client, request):
        try:
            stream = await client.chat.completions.create(**request)
        except openai.APIError as e:
            raise _transport_error(e) from e

        processor = ToolCallProcessor()
        try:
            try:
                async for raw in stream:
                    chunk = parse_chunk(raw)
                    for event in chunk_to_events(chunk, processor):
                        yield event
            except openai.APIError as e:
                raise _transport_error(e) from e

            for event in processor.finish():
                yield event
            logger.debug("Gauss stream exhausted")
        finally:
            await stream.close()


def _transport_error(e: openai.APIError) -> StreamTransportError:
    status_code = getattr(e, "status_code", None)
    retry_after = None
    response = getattr(e, "response", None)
    if response is not None:
        retry_after = parse_retry_after(response.headers.get("retry-after"))
    return StreamTransportError(
        f"Gauss request failed: {e}",
        status_code=status_code,
        retry_after=retry_after,
    )


def parse_retry_after(value: str | None) -> float | None:
    """Seconds to wait from a ``retry-after`` header.

    Accepts delta seconds, a unix timestamp, or an HTTP date.
    """
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        return max(0.0, when.timestamp() - time.time())
    now = time.time()
    if seconds > now:
        return seconds - now
    return max(0.0, seconds)
