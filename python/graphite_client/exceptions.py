"""Errors raised by graphite_client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .metric import Metric

__all__ = [
    "AddressError",
    "ConnectError",
    "ConnectTimeoutError",
    "DecodeError",
    "GraphiteError",
    "ValidationError",
    "WriteError",
    "WriteTimeoutError",
]


class GraphiteError(Exception):
    """Base exception for all graphite_client errors."""


class AddressError(GraphiteError, ValueError):
    """Raised when a client address cannot be parsed."""


class ValidationError(GraphiteError, ValueError):
    """Raised when a metric is missing a required field.

    ``index`` is the position of the offending metric within the ``send``
    call, or ``None`` when a single metric was encoded on its own.
    """

    def __init__(self, message: str, index: int | None = None, metric: Metric | None = None) -> None:
        super().__init__(message)
        self.index = index
        self.metric = metric


class ConnectError(GraphiteError, ConnectionError):
    """Raised when the client cannot reach the server."""


class ConnectTimeoutError(ConnectError, TimeoutError):
    """Raised when dialing exceeds the configured dial timeout."""


class WriteError(GraphiteError, ConnectionError):
    """Raised when writing to an established connection fails."""


class WriteTimeoutError(WriteError, TimeoutError):
    """Raised when a write exceeds the configured write timeout."""


class DecodeError(GraphiteError, ValueError):
    """Raised by the server side when a received line is malformed."""

    def __init__(self, message: str, line: Any = None) -> None:
        super().__init__(message)
        self.line = line
