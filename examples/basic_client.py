"""
basic_client.py — Minimal echo_http client example.

Prefixes a base URL, adds an auth header from middleware, logs each request
and validates the JSON payload into a pydantic model.

Usage:
    export ECHO_HTTP_BASE_URL=https://jsonplaceholder.typicode.com
    python examples/basic_client.py
"""

import logging

from pydantic import BaseModel

from echo_http import (
    ClientBuilder,
    logging_middleware,
    response_model_middleware,
    status_check_middleware,
)


class Todo(BaseModel):
    id: int
    title: str
    completed: bool


async def add_auth(ctx, call_next) -> None:
    ctx.request.options.headers.setdefault("Authorization", "Bearer demo-token")
    await call_next()


async def main() -> None:
    client = (
        ClientBuilder()
        .middleware(logging_middleware())
        .middleware(add_auth)
        .middleware(status_check_middleware())
        .middleware(response_model_middleware(Todo))
        .build()
    )

    async with client:
        response = await client.get("/todos/1")
        print(response.data)


if __name__ == "__main__":
    import asyncio

    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
