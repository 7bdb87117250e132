"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Response status and payload validation middleware.
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter, ValidationError

from ..errors import HTTPStatusError, ResponseValidationError
from ..types import Context, Middleware, Next, Response


def status_check_middleware() -> Middleware:
    """Raise `HTTPStatusError` once a 4xx/5xx `Response` comes back."""

    async def _status_check(ctx: Context, call_next: Next) -> None:
        await call_next()
        response = ctx.response
        if isinstance(response, Response) and not response.ok:
            url = response.url or (ctx.request.url if ctx.request is not None else "")
            raise HTTPStatusError(
                f"HTTP {response.status_code} for {url}",
                response=response,
            )

    return _status_check


def response_model_middleware(model: Any) -> Middleware:
    """
    Validate the response payload into `model` (a pydantic model or any type
    pydantic can validate, e.g. `list[User]`).

    For a `Response`, `data` is replaced with the parsed value; any other
    response value is replaced wholesale. Empty responses are left alone.
    """
    adapter = TypeAdapter(model)

    async def _validate(ctx: Context, call_next: Next) -> None:
        await call_next()
        response = ctx.response
        if response is None:
            return
        payload = response.data if isinstance(response, Response) else response
        try:
            parsed = adapter.validate_python(payload)
        except ValidationError as error:
            raise ResponseValidationError(
                f"Response failed validation against {getattr(model, '__name__', model)!s}: "
                f"{error.error_count()} error(s)",
                response=response,
            ) from error
        if isinstance(response, Response):
            response.data = parsed
        else:
            ctx.response = parsed

    return _validate
