"""
error_recovery.py — Error handlers, short-circuiting and cancellation.

Shows a handler that turns transport failures into a fallback value, a
middleware that answers from memory without touching the network, and
cancelling an in-flight request through its transport handle.

Usage:
    python examples/error_recovery.py
"""

from echo_http import EchoClient, RequestCancelledError, TransportError, timeout_middleware

_memory = {"/health": {"status": "cached"}}


async def answer_from_memory(ctx, call_next) -> None:
    hit = _memory.get(ctx.request.url)
    if hit is not None:
        ctx.response = hit
        return
    await call_next()


def fallback_on_transport_error(error, ctx) -> None:
    if isinstance(error, (TransportError, RequestCancelledError)):
        ctx.error_handled = True
        ctx.response = {"status": "unavailable", "reason": type(error).__name__}


async def main() -> None:
    client = EchoClient().use(answer_from_memory).use(timeout_middleware(2.0))
    client.catch(fallback_on_transport_error)

    async with client:
        print(await client.get("/health"))
        print(await client.get("http://127.0.0.1:9/unreachable"))

        handle = client.get("https://httpbin.org/delay/5")
        task = await handle.get_task()
        if task is not None:
            task.cancel()
        print(await handle)


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
