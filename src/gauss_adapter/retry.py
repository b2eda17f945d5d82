"""Retry policy for streamed requests.

The policy wraps the creation of a stream rather than decorating the
provider method: a failure before the first event re-issues the whole
request, a failure after it propagates so partial output is never replayed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
)

from gauss_adapter.errors import StreamTransportError

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS = 429


@dataclass
class RetryPolicy:
    """Bounded exponential backoff for stream creation.

    Args:
        max_attempts: Total attempts, including the first one.
        base_delay: Delay in seconds before the first retry; doubles each time.
        max_delay: Upper bound for the computed backoff delay.
        retry_all_errors: Retry every transport error, not only rate limits.
        sleep: Awaitable sleep, replaceable in tests.
        on_retry: Optional ``(attempt, exception, delay)`` callback.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0
    retry_all_errors: bool = False
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    on_retry: Callable[[int, BaseException, float], None] | None = None

    def should_retry(self, exc: BaseException) -> bool:
        if not isinstance(exc, StreamTransportError):
            return False
        if self.retry_all_errors:
            return True
        return exc.status_code == RATE_LIMIT_STATUS

    def delay_for(self, attempt: int, exc: BaseException | None = None) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        retry_after = getattr(exc, "retry_after", None)
        if retry_after is not None:
            return float(retry_after)
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)

    async def stream(
        self, factory: Callable[[], AsyncIterator]
    ) -> AsyncIterator:
        """Run ``factory()`` and retry it until it produces a first event."""
        async for attempt in self._retrying():
            with attempt:
                events = factory()
                try:
                    first = await events.__anext__()
                except StopAsyncIteration:
                    return

        try:
            yield first
            async for event in events:
                yield event
        finally:
            await events.aclose()

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            reraise=True,
            sleep=self.sleep,
            stop=stop_after_attempt(max(1, self.max_attempts)),
            wait=self._wait,
            retry=retry_if_exception(self.should_retry),
            before_sleep=self._before_sleep,
        )

    def _wait(self, retry_state: RetryCallState) -> float:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        return self.delay_for(retry_state.attempt_number, exc)

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception()
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            f"Gauss request failed (attempt {retry_state.attempt_number}"
            f"/{self.max_attempts}): {exc}. Retrying in {delay:.1f}s"
        )
        if self.on_retry is not None:
            self.on_retry(retry_state.attempt_number, exc, delay)
