"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

This module defines the request, response and context types threaded through
the middleware pipeline, plus the callable contracts middleware must follow.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Literal,
    Protocol,
    TypeAlias,
)

if TYPE_CHECKING:
    from .errors import ErrorKind


HttpMethod = Literal[
    "GET", "HEAD", "POST", "PUT", "DELETE", "CONNECT", "OPTIONS", "TRACE", "PATCH"
]
ResponseType = Literal["json", "text", "bytes"]

_OPTION_ALIASES = {
    "responseType": "response_type",
    "header": "headers",
}


@dataclass(slots=True)
class RequestOptions:
    """Per-request options bag; `None` means "not set" for merging."""

    method: HttpMethod | None = None
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None
    response_type: ResponseType | None = None
    # Transport-specific keys with no first-class field.
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "RequestOptions":
        """Build options from a plain mapping; unknown keys land in `extra`."""
        known: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in values.items():
            name = _OPTION_ALIASES.get(key, key)
            if name in ("method", "timeout", "response_type"):
                known[name] = value
            elif name == "headers":
                known["headers"] = dict(value or {})
            elif name == "extra":
                extra.update(value or {})
            else:
                extra[key] = value
        if isinstance(known.get("method"), str):
            known["method"] = known["method"].upper()
        return cls(extra=extra, **known)


@dataclass(slots=True)
class RequestConfig:
    """Outbound request descriptor; mutable by middleware once dispatched."""

    url: str
    data: Any = None
    options: RequestOptions = field(default_factory=RequestOptions)
    # Registers the transport-level handle (cancel token) once available.
    set_task: Callable[[Any], None] | None = None

    @property
    def method(self) -> str:
        return self.options.method or "GET"


@dataclass(slots=True)
class Response:
    """Normalized response produced by the bundled transport."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    data: Any = None
    url: str | None = None

    @property
    def ok(self) -> bool:
        return self.status_code < 400


@dataclass
class Context:
    """
    Mutable record shared by every middleware of one pipeline run.

    Attributes:
        request: Outbound request descriptor.
        response: Result payload, set by the terminal step or a
            short-circuiting middleware.
        error: Tracked failure, if any.
        error_handled: Set by an error handler that resolved `error`.
        error_kind: Pipeline position the tracked failure came from.
        extras: Open slot for middleware annotations (timings, ids, ...).
    """

    request: RequestConfig | None = None
    response: Any = None
    error: BaseException | None = None
    error_handled: bool = False
    error_kind: ErrorKind | None = None
    extras: dict[str, Any] = field(default_factory=dict)


Next: TypeAlias = Callable[[], Awaitable[None]]


class Middleware(Protocol):
    """Onion-model middleware: code before `await call_next()` runs inbound,
    code after it runs while unwinding."""

    def __call__(self, ctx: Context, call_next: Next) -> Awaitable[None] | None: ...


class ErrorHandler(Protocol):
    """Error handler; may set `ctx.error_handled` and a recovery `ctx.response`."""

    def __call__(self, error: BaseException, ctx: Context) -> Awaitable[None] | None: ...
