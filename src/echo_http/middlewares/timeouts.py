"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Deadline middleware racing the downstream chain against a timer.
"""

from __future__ import annotations

import asyncio

from ..errors import RequestTimeoutError
from ..types import Context, Middleware, Next


def timeout_middleware(timeout_s: float) -> Middleware:
    """
    Build middleware that fails the request when everything downstream of it
    takes longer than `timeout_s` seconds.

    The downstream chain is cancelled on expiry and `RequestTimeoutError` is
    raised from this middleware's position.
    """
    if timeout_s <= 0:
        raise ValueError("timeout_s must be > 0")

    async def _timeout(ctx: Context, call_next: Next) -> None:
        try:
            await asyncio.wait_for(call_next(), timeout=timeout_s)
        except asyncio.TimeoutError as error:
            request = ctx.request
            target = f"{request.method} {request.url}" if request is not None else "request"
            raise RequestTimeoutError(
                f"{target} exceeded {timeout_s}s",
                request=request,
            ) from error

    return _timeout
