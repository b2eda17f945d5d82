"""Exceptions raised by the Gauss adapter."""


class GaussError(RuntimeError):
    """Base class for all adapter errors."""


class ConfigurationError(GaussError):
    """A required setting is missing. Raised before any network call."""

    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.field = field


class ClientConstructionError(GaussError):
    """The underlying OpenAI client could not be built."""


class StreamTransportError(GaussError):
    """The streaming request failed on the wire.

    Args:
        message: Human readable description.
        status_code: HTTP status returned by the provider, if any.
        retry_after: Seconds the provider asked us to wait, if it said so.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        retry_after: float | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retry_after = retry_after


class StreamProtocolError(GaussError):
    """A streamed chunk did not match the expected wire shape."""
