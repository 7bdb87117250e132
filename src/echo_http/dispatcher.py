"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Onion-model middleware dispatcher with centralized error recovery.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable

from .errors import ErrorKind, ReentrantNextError, classify_failure
from .types import Context, ErrorHandler, Middleware

logger = logging.getLogger("echo_http.dispatcher")

# The terminal step has the middleware shape; its `next` is a no-op.
Terminal = Middleware


async def _invoke(fn: Callable[..., Any], *args: Any) -> None:
    """Invoke a middleware or handler, handling both sync and async signatures."""
    result = fn(*args)
    if inspect.isawaitable(result):
        await result


def _describe(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or type(fn).__name__


class Dispatcher:
    """
    Ordered middleware chain plus ordered error-handler list.

    `execute` runs middleware in registration order, then the terminal step,
    then unwinds in reverse. Any failure raised along the way is offered to
    every registered error handler (in registration order) before it is
    allowed to escape `execute`.

    Both lists are append-only and are read, not copied, by each `execute`,
    so registering while a request is in flight is the caller's problem.
    """

    def __init__(self) -> None:
        self._middleware: list[Middleware] = []
        self._error_handlers: list[ErrorHandler] = []

    @property
    def middleware(self) -> tuple[Middleware, ...]:
        return tuple(self._middleware)

    @property
    def error_handlers(self) -> tuple[ErrorHandler, ...]:
        return tuple(self._error_handlers)

    def __len__(self) -> int:
        return len(self._middleware)

    def use(self, fn: Middleware) -> "Dispatcher":
        """Append one middleware to the chain."""
        if not callable(fn):
            raise TypeError(f"Middleware must be callable, got {type(fn).__name__}")
        self._middleware.append(fn)
        return self

    def catch(self, fn: ErrorHandler) -> "Dispatcher":
        """Append one error handler; handlers run in registration order."""
        if not callable(fn):
            raise TypeError(f"Error handler must be callable, got {type(fn).__name__}")
        self._error_handlers.append(fn)
        return self

    async def execute(
        self,
        context: Context | None = None,
        terminal: Terminal | None = None,
    ) -> Context:
        """
        Run the full pipeline against `context` and return it.

        Raises the tracked error when no handler sets `error_handled`.
        Raises `ReentrantNextError` to the middleware that calls its `next`
        a second time; if uncaught there it follows the normal error path.
        """
        ctx = context if context is not None else Context()
        chain = self._middleware
        offered: list[BaseException] = []
        index = -1

        async def dispatch(i: int) -> None:
            nonlocal index
            if i <= index:
                logger.error("next() called multiple times (position %d)", i - 1)
                raise ReentrantNextError(index=i - 1)
            index = i

            if i < len(chain):
                fn = chain[i]
            elif i == len(chain) and terminal is not None:
                fn = terminal
            else:
                return

            try:
                await _invoke(fn, ctx, lambda: dispatch(i + 1))
            except Exception as error:
                await self._handle_error(error, ctx, offered, terminal=i == len(chain))

        try:
            await dispatch(0)
        except Exception as error:
            await self._handle_error(error, ctx, offered, terminal=False)

        return ctx

    async def _handle_error(
        self,
        error: Exception,
        ctx: Context,
        offered: list[BaseException],
        *,
        terminal: bool,
    ) -> None:
        # Unwinding through outer frames: handlers already saw this one.
        # A recovered failure raised again is no longer handled.
        if any(error is seen for seen in offered):
            if ctx.error_handled:
                ctx.error = error
                ctx.error_handled = False
            raise error

        offered.append(error)
        ctx.error = error
        ctx.error_handled = False
        ctx.error_kind = classify_failure(error, terminal=terminal)

        if not self._error_handlers:
            logger.debug(
                "No error handlers registered; re-raising %s (%s)",
                type(error).__name__,
                ctx.error_kind.value,
            )
            raise error

        for handler in self._error_handlers:
            try:
                await _invoke(handler, ctx.error, ctx)
            except Exception as handler_error:
                logger.warning(
                    "Error handler %s raised while handling %s",
                    _describe(handler),
                    type(ctx.error).__name__,
                    exc_info=True,
                )
                offered.append(handler_error)
                ctx.error = handler_error
                ctx.error_kind = ErrorKind.HANDLER_FAILURE
            if ctx.error_handled:
                break

        if not ctx.error_handled:
            logger.debug(
                "Unhandled %s after %d error handler(s)",
                type(ctx.error).__name__,
                len(self._error_handlers),
            )
            raise ctx.error

    @classmethod
    def compose(cls, *dispatchers: "Dispatcher") -> "Dispatcher":
        """
        Merge dispatchers into a new independent one.

        Middleware and handler lists are concatenated in argument order at call
        time; later registrations on the inputs do not affect the result.
        """
        composed = cls()
        for dispatcher in dispatchers:
            for fn in dispatcher._middleware:
                composed.use(fn)
            for handler in dispatcher._error_handlers:
                composed.catch(handler)
        return composed
