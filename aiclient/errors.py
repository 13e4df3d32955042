"""
Exception taxonomy for the client.

Every failure is terminal for the call that produced it; nothing here is
retried automatically.
"""

from __future__ import annotations

__all__ = [
    "AIClientError",
    "BadRequestError",
    "ConfigError",
    "DeserializationError",
    "HTTPStatusError",
    "SchemaError",
    "ToolNotFoundError",
    "TransportError",
]


class AIClientError(Exception):
    """Base class for all errors raised by aiclient."""


class TransportError(AIClientError):
    """Connection, TLS or timeout failure while talking to the API.

    Attributes:
        original_exc: The underlying ``httpx`` exception.
    """

    def __init__(self, message: str, original_exc: Exception | None = None) -> None:
        super().__init__(message)
        self.original_exc = original_exc
        if original_exc is not None:
            self.__cause__ = original_exc


class BadRequestError(AIClientError):
    """The API answered 400.

    OpenRouter reports malformed schemas and tool definitions this way, so
    the raw body is kept for the caller to inspect.
    """

    status_code = 400

    def __init__(self, body: str) -> None:
        super().__init__(f"Bad request: {body}")
        self.body = body


class HTTPStatusError(AIClientError):
    """Any other non-2xx status. The body is logged, not carried."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Invalid status code: {status_code}")
        self.status_code = status_code


class DeserializationError(AIClientError):
    """A response body (or tool-call arguments) could not be decoded."""


class ToolNotFoundError(AIClientError):
    """A function tool-choice names a tool that was never added."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Tool not found: {name}")
        self.name = name


class SchemaError(AIClientError):
    """A parameter shape cannot be expressed as a JSON schema."""


class ConfigError(AIClientError):
    """Configuration is incomplete, e.g. the API key is missing."""
