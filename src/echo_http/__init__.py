"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Middleware-driven asynchronous HTTP request client.

Quick start::

    from echo_http import EchoClient

    client = EchoClient().use_base_url("https://api.example.com")

    async def auth(ctx, call_next):
        ctx.request.options.headers["Authorization"] = "Bearer ..."
        await call_next()

    client.use(auth)
    user = await client.get("/users/1")
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .builder import ClientBuilder
from .client import EchoClient
from .dispatcher import Dispatcher
from .errors import (
    EchoError,
    ErrorKind,
    HTTPStatusError,
    ReentrantNextError,
    RequestCancelledError,
    RequestTimeoutError,
    ResponseValidationError,
    TransportError,
)
from .handle import RequestHandle
from .middlewares import (
    base_url_middleware,
    logging_middleware,
    response_model_middleware,
    status_check_middleware,
    timeout_middleware,
    timing_middleware,
)
from .options import coerce_options, merge_request_options
from .settings import ClientSettings
from .transports import HttpxTaskHandle, HttpxTransport, Transport, TransportHandle
from .types import (
    Context,
    ErrorHandler,
    HttpMethod,
    Middleware,
    Next,
    RequestConfig,
    RequestOptions,
    Response,
    ResponseType,
)


def create_client(
    *,
    settings: ClientSettings | None = None,
    options: RequestOptions | Mapping[str, Any] | None = None,
    transport: Transport | None = None,
) -> EchoClient:
    """Create a client from explicit or environment settings."""
    resolved = settings or ClientSettings.from_env()
    client = EchoClient(
        merge_request_options(resolved.default_options(), options),
        transport or HttpxTransport(settings=resolved),
    )
    if resolved.base_url:
        client.use_base_url(resolved.base_url)
    return client


__all__ = [
    "EchoClient",
    "ClientBuilder",
    "ClientSettings",
    "Dispatcher",
    "RequestHandle",
    "create_client",
    "Context",
    "RequestConfig",
    "RequestOptions",
    "Response",
    "HttpMethod",
    "ResponseType",
    "Middleware",
    "ErrorHandler",
    "Next",
    "Transport",
    "TransportHandle",
    "HttpxTransport",
    "HttpxTaskHandle",
    "coerce_options",
    "merge_request_options",
    "base_url_middleware",
    "timeout_middleware",
    "timing_middleware",
    "logging_middleware",
    "status_check_middleware",
    "response_model_middleware",
    "EchoError",
    "ErrorKind",
    "ReentrantNextError",
    "TransportError",
    "RequestTimeoutError",
    "RequestCancelledError",
    "HTTPStatusError",
    "ResponseValidationError",
]
