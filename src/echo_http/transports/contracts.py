"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Typed transport contracts consumed by the client's terminal step.
"""

from __future__ import annotations

from typing import Any, Awaitable, Protocol

from ..types import RequestConfig


class Transport(Protocol):
    """
    Sends one request and resolves with its response payload.

    A transport may call `config.set_task(handle)` at most once, at any point
    before its awaitable settles, to expose a cancel handle to the caller.
    """

    def __call__(self, config: RequestConfig) -> Awaitable[Any]: ...


class TransportHandle(Protocol):
    """Transport-level handle; only the owning transport knows its semantics."""

    def cancel(self) -> bool: ...
