"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: builder.py.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace

from .client import EchoClient
from .options import merge_request_options
from .settings import ClientSettings
from .transports.contracts import Transport
from .transports.httpx_transport import HttpxTransport
from .types import ErrorHandler, Middleware, RequestOptions


class ClientBuilder:
    """Builder-first DX for assembling a configured `EchoClient`."""

    def __init__(self) -> None:
        self._settings = ClientSettings.from_env()
        self._headers: dict[str, str] = {}
        self._transport: Transport | None = None
        self._middlewares: list[Middleware] = []
        self._error_handlers: list[ErrorHandler] = []

    def settings(self, settings: ClientSettings) -> "ClientBuilder":
        """Replace builder settings with an explicit `ClientSettings` instance."""
        self._settings = settings
        return self

    def base_url(self, base_url: str | None) -> "ClientBuilder":
        """Set the base URL prefixed to relative request URLs."""
        self._settings = replace(self._settings, base_url=base_url)
        return self

    def timeout(self, timeout_s: float | None) -> "ClientBuilder":
        """Set the default per-request timeout in seconds."""
        self._settings = replace(self._settings, timeout_s=timeout_s)
        return self

    def headers(self, headers: Mapping[str, str]) -> "ClientBuilder":
        """Add default headers sent with every request."""
        self._headers.update(headers)
        return self

    def transport(self, transport: Transport) -> "ClientBuilder":
        """Use a custom transport instead of the bundled httpx one."""
        self._transport = transport
        return self

    def middleware(self, fn: Middleware) -> "ClientBuilder":
        """Queue one middleware; installed after the base-URL middleware."""
        self._middlewares.append(fn)
        return self

    def error_handler(self, fn: ErrorHandler) -> "ClientBuilder":
        """Queue one error handler."""
        self._error_handlers.append(fn)
        return self

    def build(self) -> EchoClient:
        """Materialize one configured `EchoClient` instance."""
        options = merge_request_options(
            self._settings.default_options(),
            RequestOptions(headers=dict(self._headers)),
        )
        transport = self._transport or HttpxTransport(settings=self._settings)
        client = EchoClient(options, transport)
        if self._settings.base_url:
            client.use_base_url(self._settings.base_url)
        for fn in self._middlewares:
            client.use(fn)
        for handler in self._error_handlers:
            client.catch(handler)
        return client
