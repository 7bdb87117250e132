"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: options.py.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .types import RequestOptions


def coerce_options(value: RequestOptions | Mapping[str, Any] | None) -> RequestOptions:
    """Normalize caller-supplied options into a fresh `RequestOptions`."""
    if value is None:
        return RequestOptions()
    if isinstance(value, RequestOptions):
        return RequestOptions(
            method=value.method,
            headers=dict(value.headers),
            timeout=value.timeout,
            response_type=value.response_type,
            extra=dict(value.extra),
        )
    if isinstance(value, Mapping):
        return RequestOptions.from_mapping(value)
    raise TypeError(f"Unsupported request options type: {type(value).__name__}")


def merge_request_options(
    defaults: RequestOptions | Mapping[str, Any] | None,
    overrides: RequestOptions | Mapping[str, Any] | None,
) -> RequestOptions:
    """
    Merge instance defaults with call-site options.

    Call-site values win field by field; `headers` and `extra` are merged key
    by key with call-site keys winning. Inputs are never mutated.
    """
    base = coerce_options(defaults)
    top = coerce_options(overrides)
    return RequestOptions(
        method=top.method if top.method is not None else base.method,
        headers={**base.headers, **top.headers},
        timeout=top.timeout if top.timeout is not None else base.timeout,
        response_type=(
            top.response_type if top.response_type is not None else base.response_type
        ),
        extra={**base.extra, **top.extra},
    )
