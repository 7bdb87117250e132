"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Request orchestrator: one client call becomes one dispatcher run.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from .dispatcher import Dispatcher
from .handle import RequestHandle
from .middlewares.urls import base_url_middleware
from .options import coerce_options, merge_request_options
from .transports.contracts import Transport
from .transports.httpx_transport import HttpxTransport
from .types import (
    Context,
    ErrorHandler,
    HttpMethod,
    Middleware,
    Next,
    RequestConfig,
    RequestOptions,
)

logger = logging.getLogger("echo_http.client")

OptionsInput = RequestOptions | Mapping[str, Any] | None


class EchoClient:
    """
    HTTP client whose every request runs through an ordered middleware chain.

    The transport is the last link of the chain. A middleware may rewrite the
    request, short-circuit with its own `ctx.response`, or post-process the
    response while the chain unwinds. Failures go to the handlers registered
    with `catch`; a handler that sets `ctx.error_handled = True` turns the
    failure into a resolved request carrying `ctx.response`.
    """

    def __init__(
        self,
        options: OptionsInput = None,
        transport: Transport | None = None,
    ) -> None:
        self._dispatcher = Dispatcher()
        self._default_options = coerce_options(options)
        self._transport: Transport = transport if transport is not None else HttpxTransport()

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def default_options(self) -> RequestOptions:
        return coerce_options(self._default_options)

    def use(self, fn: Middleware) -> "EchoClient":
        """Register one middleware; runs in registration order."""
        self._dispatcher.use(fn)
        return self

    def catch(self, fn: ErrorHandler) -> "EchoClient":
        """Register one error handler; runs in registration order."""
        self._dispatcher.catch(fn)
        return self

    def use_base_url(self, base_url: str) -> "EchoClient":
        """Prefix every relative request URL with `base_url`."""
        return self.use(base_url_middleware(base_url))

    def request(
        self,
        url: str,
        data: Any = None,
        options: OptionsInput = None,
    ) -> RequestHandle[Any]:
        """
        Start one request and return its handle.

        Must be called from a running event loop; the pipeline is scheduled
        right away and runs whether or not the handle is awaited.
        """
        loop = asyncio.get_running_loop()
        task_future: asyncio.Future[Any] = loop.create_future()

        def set_task(handle: Any) -> None:
            if not task_future.done():
                task_future.set_result(handle)

        context = Context(
            request=RequestConfig(
                url=url,
                data=data,
                options=merge_request_options(self._default_options, options),
                set_task=set_task,
            )
        )
        response = loop.create_task(self._run(context))
        response.add_done_callback(lambda _: set_task(None))
        return RequestHandle(response=response, task=task_future)

    async def _terminal(self, ctx: Context, call_next: Next) -> None:
        await call_next()
        ctx.response = await self._transport(ctx.request)

    async def _run(self, context: Context) -> Any:
        request = context.request
        logger.debug("Dispatching %s %s", request.method, request.url)
        try:
            await self._dispatcher.execute(context, self._terminal)
        except Exception as error:
            if context.error is None:
                context.error = error
            if not context.error_handled:
                raise
            return context.response

        if context.error is not None and not context.error_handled:
            raise context.error
        return context.response

    def _with_method(self, options: OptionsInput, method: HttpMethod) -> RequestOptions:
        resolved = coerce_options(options)
        resolved.method = method
        return resolved

    def get(self, url: str, params: Any = None, options: OptionsInput = None) -> RequestHandle[Any]:
        return self.request(url, params, self._with_method(options, "GET"))

    def post(self, url: str, data: Any = None, options: OptionsInput = None) -> RequestHandle[Any]:
        return self.request(url, data, self._with_method(options, "POST"))

    def put(self, url: str, data: Any = None, options: OptionsInput = None) -> RequestHandle[Any]:
        return self.request(url, data, self._with_method(options, "PUT"))

    def delete(self, url: str, data: Any = None, options: OptionsInput = None) -> RequestHandle[Any]:
        return self.request(url, data, self._with_method(options, "DELETE"))

    def patch(self, url: str, data: Any = None, options: OptionsInput = None) -> RequestHandle[Any]:
        return self.request(url, data, self._with_method(options, "PATCH"))

    def head(self, url: str, params: Any = None, options: OptionsInput = None) -> RequestHandle[Any]:
        return self.request(url, params, self._with_method(options, "HEAD"))

    def options(self, url: str, data: Any = None, options: OptionsInput = None) -> RequestHandle[Any]:
        return self.request(url, data, self._with_method(options, "OPTIONS"))

    async def aclose(self) -> None:
        """Close the transport when it owns closable resources."""
        close = getattr(self._transport, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "EchoClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
