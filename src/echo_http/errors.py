"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Error taxonomy shared by the dispatcher, transports and prebuilt middleware.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .types import RequestConfig


class ErrorKind(str, Enum):
    """Where in the pipeline a captured failure originated."""

    REENTRANT_NEXT = "reentrant_next"
    MIDDLEWARE_FAILURE = "middleware_failure"
    TERMINAL_FAILURE = "terminal_failure"
    HANDLER_FAILURE = "handler_failure"


class EchoError(Exception):
    """Base class for all errors raised by echo_http itself."""


class ReentrantNextError(EchoError):
    """A middleware invoked its continuation more than once."""

    kind = ErrorKind.REENTRANT_NEXT

    def __init__(self, message: str = "next() called multiple times", *, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index


class TransportError(EchoError):
    """Transport-level failure raised by the bundled transport."""

    def __init__(self, message: str, *, request: RequestConfig | None = None) -> None:
        super().__init__(message)
        self.request = request


class RequestTimeoutError(TransportError):
    """Request did not complete before its deadline."""


class RequestCancelledError(TransportError):
    """Request was cancelled through its transport handle."""


class HTTPStatusError(EchoError):
    """Response carried a 4xx/5xx status code."""

    def __init__(self, message: str, *, response: Any) -> None:
        super().__init__(message)
        self.response = response


class ResponseValidationError(EchoError):
    """Response payload failed model validation."""

    def __init__(self, message: str, *, response: Any = None) -> None:
        super().__init__(message)
        self.response = response


def classify_failure(error: BaseException, *, terminal: bool) -> ErrorKind:
    """Map one failure caught at a dispatch frame to its `ErrorKind`."""
    if isinstance(error, ReentrantNextError):
        return ErrorKind.REENTRANT_NEXT
    if terminal:
        return ErrorKind.TERMINAL_FAILURE
    return ErrorKind.MIDDLEWARE_FAILURE
