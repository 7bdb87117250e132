from __future__ import annotations

import asyncio

import pytest

from echo_http import Context, Dispatcher, ErrorKind, ReentrantNextError


def run_async(coro):
    return asyncio.run(coro)


def _recording_terminal(order: list[str], label: str = "core"):
    async def _terminal(ctx, call_next):
        order.append(label)
        await call_next()

    return _terminal


def test_middleware_runs_in_onion_order():
    order: list[str] = []
    dispatcher = Dispatcher()

    async def first(ctx, call_next):
        order.append("before-1")
        await call_next()
        order.append("after-1")

    async def second(ctx, call_next):
        order.append("before-2")
        await call_next()
        order.append("after-2")

    dispatcher.use(first).use(second)
    run_async(dispatcher.execute(Context(), _recording_terminal(order)))

    assert order == ["before-1", "before-2", "core", "after-2", "after-1"]


def test_short_circuit_skips_downstream_and_terminal():
    calls: list[str] = []
    dispatcher = Dispatcher()

    async def short_circuit(ctx, call_next):
        ctx.response = {"data": "x"}

    async def never(ctx, call_next):
        calls.append("never")
        await call_next()

    dispatcher.use(short_circuit).use(never)
    ctx = run_async(dispatcher.execute(Context(), _recording_terminal(calls, "terminal")))

    assert calls == []
    assert ctx.response == {"data": "x"}
    assert ctx.error is None


def test_handler_recovers_from_middleware_failure():
    dispatcher = Dispatcher()
    boom = RuntimeError("boom")
    seen: list[BaseException] = []

    async def failing(ctx, call_next):
        raise boom

    async def recover(error, ctx):
        seen.append(error)
        ctx.error_handled = True
        ctx.response = {"recovered": True}

    dispatcher.use(failing).catch(recover)
    ctx = run_async(dispatcher.execute(Context(), _recording_terminal([])))

    assert seen == [boom]
    assert ctx.error is boom
    assert ctx.error_handled is True
    assert ctx.error_kind == ErrorKind.MIDDLEWARE_FAILURE
    assert ctx.response == {"recovered": True}


def test_unhandled_failure_propagates_without_handlers():
    dispatcher = Dispatcher()
    boom = RuntimeError("boom")

    async def failing(ctx, call_next):
        raise boom

    dispatcher.use(failing)
    ctx = Context()

    async def scenario() -> None:
        with pytest.raises(RuntimeError) as excinfo:
            await dispatcher.execute(ctx, _recording_terminal([]))
        assert excinfo.value is boom

    run_async(scenario())
    assert ctx.error is boom
    assert ctx.error_handled is False


def test_calling_next_twice_raises_reentrant_error_on_second_call():
    dispatcher = Dispatcher()
    order: list[str] = []
    raised: list[BaseException] = []

    async def twice(ctx, call_next):
        await call_next()
        try:
            await call_next()
        except ReentrantNextError as error:
            raised.append(error)
            raise

    dispatcher.use(twice)
    ctx = Context()

    async def scenario() -> None:
        with pytest.raises(ReentrantNextError):
            await dispatcher.execute(ctx, _recording_terminal(order))

    run_async(scenario())
    assert order == ["core"]
    assert len(raised) == 1
    assert ctx.error_kind == ErrorKind.REENTRANT_NEXT


def test_reentrant_next_goes_through_error_handlers():
    dispatcher = Dispatcher()
    kinds: list[ErrorKind | None] = []

    async def twice(ctx, call_next):
        await call_next()
        await call_next()

    def claim(error, ctx):
        kinds.append(ctx.error_kind)
        ctx.error_handled = True

    dispatcher.use(twice).catch(claim)
    ctx = run_async(dispatcher.execute(Context()))

    assert kinds == [ErrorKind.REENTRANT_NEXT]
    assert isinstance(ctx.error, ReentrantNextError)


def test_failure_after_next_is_routed_to_handlers():
    dispatcher = Dispatcher()
    order: list[str] = []

    async def fails_on_unwind(ctx, call_next):
        await call_next()
        order.append("unwind")
        raise ValueError("after next")

    async def recover(error, ctx):
        order.append(f"handler:{error}")
        ctx.error_handled = True

    dispatcher.use(fails_on_unwind).catch(recover)
    ctx = run_async(dispatcher.execute(Context(), _recording_terminal(order)))

    assert order == ["core", "unwind", "handler:after next"]
    assert isinstance(ctx.error, ValueError)
    assert ctx.error_handled is True


def test_terminal_failure_is_classified_and_recoverable():
    dispatcher = Dispatcher()

    async def terminal(ctx, call_next):
        await call_next()
        raise ConnectionError("transport down")

    def recover(error, ctx):
        ctx.error_handled = True
        ctx.response = "fallback"

    dispatcher.catch(recover)
    ctx = run_async(dispatcher.execute(Context(), terminal))

    assert ctx.error_kind == ErrorKind.TERMINAL_FAILURE
    assert ctx.response == "fallback"


def test_handlers_run_in_registration_order_until_one_claims():
    dispatcher = Dispatcher()
    order: list[str] = []

    async def failing(ctx, call_next):
        raise RuntimeError("boom")

    async def first(error, ctx):
        order.append("first")

    async def second(error, ctx):
        order.append("second")
        ctx.error_handled = True

    async def third(error, ctx):
        order.append("third")

    dispatcher.use(failing).catch(first).catch(second).catch(third)
    run_async(dispatcher.execute(Context()))

    assert order == ["first", "second"]


def test_handler_failure_replaces_error_and_loop_continues():
    dispatcher = Dispatcher()
    seen: list[BaseException] = []
    replacement = ValueError("handler broke")

    async def failing(ctx, call_next):
        raise RuntimeError("boom")

    async def broken(error, ctx):
        seen.append(error)
        raise replacement

    async def claim(error, ctx):
        seen.append(error)
        ctx.error_handled = True

    dispatcher.use(failing).catch(broken).catch(claim)
    ctx = run_async(dispatcher.execute(Context()))

    assert isinstance(seen[0], RuntimeError)
    assert seen[1] is replacement
    assert ctx.error is replacement
    assert ctx.error_kind == ErrorKind.HANDLER_FAILURE
    assert ctx.error_handled is True


def test_last_handler_failure_is_raised_when_nobody_claims():
    dispatcher = Dispatcher()

    async def failing(ctx, call_next):
        raise RuntimeError("boom")

    async def broken(error, ctx):
        raise KeyError("from handler")

    dispatcher.use(failing).catch(broken)

    async def scenario() -> None:
        with pytest.raises(KeyError):
            await dispatcher.execute(Context())

    run_async(scenario())


def test_unclaimed_failure_is_offered_to_each_handler_once():
    dispatcher = Dispatcher()
    calls: list[str] = []

    async def outer(ctx, call_next):
        await call_next()

    async def middle(ctx, call_next):
        await call_next()

    async def failing(ctx, call_next):
        raise RuntimeError("deep")

    async def observe(error, ctx):
        calls.append(str(error))

    dispatcher.use(outer).use(middle).use(failing).catch(observe)

    async def scenario() -> None:
        with pytest.raises(RuntimeError):
            await dispatcher.execute(Context())

    run_async(scenario())
    assert calls == ["deep"]


def test_handled_inner_failure_lets_outer_middleware_continue():
    dispatcher = Dispatcher()
    order: list[str] = []

    async def outer(ctx, call_next):
        order.append("outer-before")
        await call_next()
        order.append("outer-after")

    async def failing(ctx, call_next):
        raise RuntimeError("inner")

    def claim(error, ctx):
        ctx.error_handled = True
        ctx.response = "recovered"

    dispatcher.use(outer).use(failing).catch(claim)
    ctx = run_async(dispatcher.execute(Context()))

    assert order == ["outer-before", "outer-after"]
    assert ctx.response == "recovered"


def test_new_failure_after_recovery_is_tracked_and_offered():
    dispatcher = Dispatcher()
    seen: list[str] = []

    async def outer(ctx, call_next):
        await call_next()
        raise KeyError("outer")

    async def inner(ctx, call_next):
        raise RuntimeError("inner")

    def claim_runtime_only(error, ctx):
        seen.append(type(error).__name__)
        if isinstance(error, RuntimeError):
            ctx.error_handled = True

    dispatcher.use(outer).use(inner).catch(claim_runtime_only)
    ctx = Context()

    async def scenario() -> None:
        with pytest.raises(KeyError):
            await dispatcher.execute(ctx)

    run_async(scenario())
    assert seen == ["RuntimeError", "KeyError"]
    assert isinstance(ctx.error, KeyError)
    assert ctx.error_handled is False


def test_recovered_failure_raised_again_is_no_longer_handled():
    dispatcher = Dispatcher()
    seen: list[BaseException] = []

    async def outer(ctx, call_next):
        await call_next()
        raise ctx.error

    async def failing(ctx, call_next):
        raise RuntimeError("inner")

    def claim(error, ctx):
        seen.append(error)
        ctx.error_handled = True

    dispatcher.use(outer).use(failing).catch(claim)
    ctx = Context()

    async def scenario() -> None:
        with pytest.raises(RuntimeError, match="inner"):
            await dispatcher.execute(ctx)

    run_async(scenario())
    assert len(seen) == 1
    assert ctx.error is seen[0]
    assert ctx.error_handled is False


def test_sync_middleware_and_handlers_are_supported():
    dispatcher = Dispatcher()

    def tag(ctx, call_next):
        ctx.extras["tagged"] = True
        return call_next()

    def failing(ctx, call_next):
        raise RuntimeError("sync failure")

    def claim(error, ctx):
        ctx.error_handled = True

    dispatcher.use(tag).use(failing).catch(claim)
    ctx = run_async(dispatcher.execute())

    assert ctx.extras == {"tagged": True}
    assert ctx.error_handled is True


def test_execute_without_terminal_completes():
    dispatcher = Dispatcher()
    order: list[str] = []

    async def only(ctx, call_next):
        order.append("before")
        await call_next()
        order.append("after")

    dispatcher.use(only)
    ctx = run_async(dispatcher.execute())

    assert order == ["before", "after"]
    assert ctx.response is None


def test_use_and_catch_reject_non_callables():
    dispatcher = Dispatcher()
    with pytest.raises(TypeError):
        dispatcher.use("not callable")  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        dispatcher.catch(42)  # type: ignore[arg-type]
    assert len(dispatcher) == 0


def test_concurrent_executions_share_lists_but_not_state():
    dispatcher = Dispatcher()

    async def yielding(ctx, call_next):
        await asyncio.sleep(0)
        await call_next()
        await asyncio.sleep(0)

    async def terminal(ctx, call_next):
        await call_next()
        ctx.response = ctx.extras["id"]

    dispatcher.use(yielding).use(yielding)

    async def scenario():
        contexts = [Context(extras={"id": n}) for n in range(5)]
        return await asyncio.gather(
            *(dispatcher.execute(ctx, terminal) for ctx in contexts)
        )

    results = run_async(scenario())
    assert [ctx.response for ctx in results] == [0, 1, 2, 3, 4]
