"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: handle.py.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Generator, Generic, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class RequestHandle(Generic[T]):
    """
    Pending request: the response future plus the transport-handle future.

    `await handle` yields the response. `await handle.get_task()` yields the
    transport handle (e.g. an `HttpxTaskHandle`), or `None` when the request
    finished without the transport registering one. The two futures settle
    independently and in either order.
    """

    response: asyncio.Future[T]
    task: asyncio.Future[Any]

    def __await__(self) -> Generator[Any, None, T]:
        return self.response.__await__()

    async def get_task(self) -> Any:
        return await asyncio.shield(self.task)

    def done(self) -> bool:
        return self.response.done()
