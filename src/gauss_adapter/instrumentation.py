"""Optional OpenTelemetry instrumentation.

Call ``gauss_adapter.instrument()`` once at startup to emit a span per
streamed completion. Requires ``opentelemetry-api``; the adapter works
identically without it.
"""

import importlib.util
import logging
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)

_tracer = None


def instrument(*, tracer_name: str = "gauss_adapter") -> None:
    """Enable OpenTelemetry tracing for every ``create_message`` call.

    Configure a TracerProvider first, otherwise spans are discarded::

        from opentelemetry import trace
        from opentelemetry.sdk.trace import TracerProvider

        trace.set_tracer_provider(TracerProvider())

        import gauss_adapter
        gauss_adapter.instrument()

    Args:
        tracer_name: Name passed to ``trace.get_tracer()``.

    Raises:
        ImportError: If ``opentelemetry-api`` is not installed.
    """
    global _tracer
    if importlib.util.find_spec("opentelemetry.trace") is None:
        raise ImportError(
            "opentelemetry-api is required for instrumentation. "
            "Install it with: pip install gauss-adapter[otel]"
        )
    from opentelemetry import trace
    _tracer = trace.get_tracer(tracer_name)
    if isinstance(_tracer, trace.NoOpTracer):
        logger.info(
            "No TracerProvider configured; spans will be "
            "discarded. Set up a TracerProvider to export "
            "traces."
        )
    else:
        logger.info("Gauss adapter instrumentation enabled")


def uninstrument() -> None:
    """Disable OpenTelemetry tracing."""
    global _tracer
    _tracer = None


@asynccontextmanager
async def completion_span(system: str, model: str):
    """Wrap one streamed completion in a ``chat`` span.

    The span is never made current: the stream yields to the consumer
    between events, and spans the consumer opens there must not become
    its children.
    """
    if _tracer is None:
        yield None
        return
    from opentelemetry.trace import SpanKind

    span = _tracer.start_span(
        f"chat {model}",
        kind=SpanKind.CLIENT,
        attributes={
            "gen_ai.operation.name": "chat",
            "gen_ai.provider.name": system,
            "gen_ai.request.model": model,
        },
    )
    try:
        yield span
    finally:
        span.end()


def record_request(span, params) -> None:
    """Set sampling attributes for the parameters actually sent."""
    if span is None:
        return
    if params.temperature is not None:
        span.set_attribute("gen_ai.request.temperature", params.temperature)
    if params.max_tokens is not None:
        span.set_attribute("gen_ai.request.max_tokens", params.max_tokens)


def record_usage(span, usage) -> None:
    """Set token-usage attributes from a ``UsageEvent``."""
    if span is None or usage is None:
        return
    span.set_attribute("gen_ai.usage.input_tokens", usage.input_tokens)
    span.set_attribute("gen_ai.usage.output_tokens", usage.output_tokens)
    if usage.cache_read_tokens:
        span.set_attribute(
            "gen_ai.usage.cache_read_tokens", usage.cache_read_tokens
        )
    if usage.cache_write_tokens:
        span.set_attribute(
            "gen_ai.usage.cache_write_tokens", usage.cache_write_tokens
        )


def record_error(span, exception: BaseException) -> None:
    """Record an exception and set ERROR status on a span.

    Sets ``error.type`` per GenAI semantic conventions.
    No-ops when *span* is ``None`` (tracing disabled).
    """
    if span is None:
        return
    from opentelemetry.trace import StatusCode

    span.set_status(StatusCode.ERROR, str(exception))
    span.record_exception(exception)
    span.set_attribute(
        "error.type", type(exception).__qualname__
    )
