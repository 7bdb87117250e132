"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Default transport built on `httpx.AsyncClient`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from ..errors import RequestCancelledError, RequestTimeoutError, TransportError
from ..settings import ClientSettings
from ..types import RequestConfig, Response, ResponseType

logger = logging.getLogger("echo_http.transports.httpx")

_QUERY_METHODS = frozenset({"GET", "HEAD"})


class HttpxTaskHandle:
    """Cancel handle for one in-flight send."""

    def __init__(self, task: asyncio.Future[httpx.Response]) -> None:
        self._task = task
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> bool:
        """Abort the send; the pending request fails with `RequestCancelledError`."""
        if self._task.done():
            return False
        self._cancelled = True
        return self._task.cancel()


class HttpxTransport:
    """
    Transport that sends `RequestConfig`s through one shared `httpx.AsyncClient`.

    The client is created lazily unless one is injected (tests pass a client
    backed by `httpx.MockTransport`). Injected clients are not closed by
    `aclose()`.
    """

    def __init__(
        self,
        *,
        settings: ClientSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or ClientSettings()
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                follow_redirects=self._settings.follow_redirects,
                verify=self._settings.verify_ssl,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def build_request(self, config: RequestConfig) -> httpx.Request:
        """Translate one request descriptor into an `httpx.Request`."""
        options = config.options
        method = config.method
        payload: dict[str, Any] = {}
        data = config.data
        if data is not None:
            if method in _QUERY_METHODS:
                if not isinstance(data, (Mapping, str)):
                    raise TypeError(
                        f"{method} data must be a mapping or query string, got {type(data).__name__}"
                    )
                payload["params"] = data
            elif isinstance(data, (bytes, bytearray, str)):
                payload["content"] = data
            else:
                payload["json"] = data

        timeout = options.timeout if options.timeout is not None else self._settings.timeout_s
        return self._get_client().build_request(
            method,
            config.url,
            headers=options.headers,
            timeout=timeout,
            **payload,
        )

    async def __call__(self, config: RequestConfig) -> Response:
        try:
            request = self.build_request(config)
        except httpx.InvalidURL as error:
            raise TransportError(
                f"Invalid request URL: {config.method} {config.url}: {error}",
                request=config,
            ) from error

        task = asyncio.ensure_future(self._get_client().send(request))
        handle = HttpxTaskHandle(task)
        if config.set_task is not None:
            config.set_task(handle)

        try:
            raw = await task
        except asyncio.CancelledError:
            if handle.cancelled:
                raise RequestCancelledError(
                    f"Request cancelled: {config.method} {config.url}",
                    request=config,
                ) from None
            raise
        except httpx.TimeoutException as error:
            raise RequestTimeoutError(
                f"Request timed out: {config.method} {config.url}",
                request=config,
            ) from error
        except (httpx.HTTPError, httpx.InvalidURL) as error:
            raise TransportError(
                f"Request failed: {config.method} {config.url}: {error}",
                request=config,
            ) from error

        logger.debug("%s %s -> %d", config.method, config.url, raw.status_code)
        response_type = config.options.response_type or self._settings.response_type
        return Response(
            status_code=raw.status_code,
            headers=dict(raw.headers),
            data=_decode(raw, response_type),
            url=str(raw.url),
        )


def _decode(raw: httpx.Response, response_type: ResponseType) -> Any:
    if response_type == "bytes":
        return raw.content
    if response_type == "text":
        return raw.text
    if not raw.content:
        return None
    try:
        return raw.json()
    except ValueError:
        return raw.text
