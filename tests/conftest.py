import pytest

from gauss_adapter.config import ModelInfo
from gauss_adapter.provider import GaussProvider
from gauss_adapter.retry import RetryPolicy


# ---------------------------------------------------------------------------
# Fake stream (mirrors openai.AsyncStream: async iterable + close())
# ---------------------------------------------------------------------------

class FakeStream:
    """Replays raw chunks; optionally raises after a number of chunks."""

    def __init__(self, chunks, error: Exception | None = None, fail_after: int = 0):
        self._chunks = list(chunks)
        self._error = error
        self._fail_after = fail_after
        self.closed = False
        self.consumed = 0

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for i, chunk in enumerate(self._chunks):
            if self._error is not None and i == self._fail_after:
                raise self._error
            self.consumed += 1
            yield chunk
        if self._error is not None and self._fail_after >= len(self._chunks):
            raise self._error

    async def close(self):
        self.closed = True


# ---------------------------------------------------------------------------
# Chunk builder helpers
# ---------------------------------------------------------------------------

def make_text_chunk(content: str, finish_reason: str | None = None) -> dict:
    return {
        "choices": [{
            "index": 0,
            "delta": {"content": content},
            "finish_reason": finish_reason,
        }],
    }


def make_reasoning_chunk(reasoning: str) -> dict:
    return {
        "choices": [{
            "index": 0,
            "delta": {"content": None, "reasoning_content": reasoning},
        }],
    }


def make_tool_chunk(
    index: int,
    arguments: str | None = None,
    call_id: str | None = None,
    name: str | None = None,
    finish_reason: str | None = None,
) -> dict:
    function = {}
    if name is not None:
        function["name"] = name
    if arguments is not None:
        function["arguments"] = arguments
    tool_call = {"index": index, "function": function}
    if call_id is not None:
        tool_call["id"] = call_id
        tool_call["type"] = "function"
    return {
        "choices": [{
            "index": 0,
            "delta": {"tool_calls": [tool_call]},
            "finish_reason": finish_reason,
        }],
    }


def make_finish_chunk(finish_reason: str = "stop") -> dict:
    return {"choices": [{"index": 0, "delta": {}, "finish_reason": finish_reason}]}


def make_usage_chunk(
    prompt_tokens: int,
    completion_tokens: int,
    cached_tokens: int | None = None,
    cache_miss_tokens: int | None = None,
) -> dict:
    usage = {
        "prompt_tokens": prompt_tokens,
        "completion_tokens": completion_tokens,
    }
    if cached_tokens is not None:
        usage["prompt_tokens_details"] = {"cached_tokens": cached_tokens}
    if cache_miss_tokens is not None:
        usage["prompt_cache_miss_tokens"] = cache_miss_tokens
    return {"choices": [], "usage": usage}


async def collect(events) -> list:
    return [e async for e in events]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fast_retry():
    """Retry policy that records delays instead of sleeping."""
    delays: list[float] = []

    async def _sleep(delay: float) -> None:
        delays.append(delay)

    policy = RetryPolicy(sleep=_sleep)
    policy.recorded_delays = delays
    return policy


@pytest.fixture
def make_provider(fast_retry, monkeypatch):
    """Factory for providers with credentials and a non-sleeping retry policy."""
    monkeypatch.delenv("GAUSS_API_KEY", raising=False)
    monkeypatch.delenv("GAUSS_CLIENT_KEY", raising=False)
    monkeypatch.delenv("GAUSS_BASE_URL", raising=False)

    def _make(
        api_key="test-key",
        client_key="client-key",
        model_id="gauss-large",
        model_info: ModelInfo | None = None,
        reasoning_effort=None,
        retry_policy=None,
        **kwargs,
    ):
        return GaussProvider(
            api_key=api_key,
            client_key=client_key,
            model_id=model_id,
            model_info=model_info,
            reasoning_effort=reasoning_effort,
            retry_policy=retry_policy or fast_retry,
            **kwargs,
        )
    return _make
