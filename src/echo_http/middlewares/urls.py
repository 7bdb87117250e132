"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Base-URL prefixing middleware.
"""

from __future__ import annotations

from ..types import Context, Middleware, Next


def join_base_url(base_url: str, url: str) -> str:
    """Join `base_url` and a relative `url` with exactly one slash."""
    prefix = base_url[:-1] if base_url.endswith("/") else base_url
    path = url if url.startswith("/") else f"/{url}"
    return f"{prefix}{path}"


def base_url_middleware(base_url: str) -> Middleware:
    """
    Build middleware that prefixes relative request URLs with `base_url`.

    URLs that already start with `http` are treated as absolute and left as-is.
    """

    async def _base_url(ctx: Context, call_next: Next) -> None:
        request = ctx.request
        if request is not None and request.url and not request.url.startswith("http"):
            request.url = join_base_url(base_url, request.url)
        await call_next()

    return _base_url
