"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Timing and request-logging middleware.
"""

from __future__ import annotations

import logging
import time

from ..types import Context, Middleware, Next

_request_logger = logging.getLogger("echo_http.requests")


def timing_middleware(key: str = "elapsed_s") -> Middleware:
    """Record seconds spent downstream in `ctx.extras[key]`, even on failure."""

    async def _timing(ctx: Context, call_next: Next) -> None:
        started = time.perf_counter()
        try:
            await call_next()
        finally:
            ctx.extras[key] = time.perf_counter() - started

    return _timing


def logging_middleware(
    logger: logging.Logger | None = None,
    *,
    level: int = logging.INFO,
) -> Middleware:
    """Log one line per request with method, URL, outcome and latency."""
    log = logger or _request_logger

    async def _log_request(ctx: Context, call_next: Next) -> None:
        started = time.perf_counter()
        try:
            await call_next()
        except Exception as error:
            request = ctx.request
            log.warning(
                "%s %s failed after %.3fs: %s",
                request.method if request is not None else "-",
                request.url if request is not None else "-",
                time.perf_counter() - started,
                type(error).__name__,
            )
            raise

        request = ctx.request
        status = getattr(ctx.response, "status_code", None)
        outcome = "recovered" if ctx.error is not None and ctx.error_handled else status or "ok"
        log.log(
            level,
            "%s %s -> %s in %.3fs",
            request.method if request is not None else "-",
            request.url if request is not None else "-",
            outcome,
            time.perf_counter() - started,
        )

    return _log_request
