import asyncio

import pytest

from catalog.lifecycle import CANCELLED_ERROR, DEFAULT_ERROR, FetchLifecycle, LoadStatus


@pytest.mark.asyncio
async def test_starts_idle_and_succeeds():
    lifecycle = FetchLifecycle()
    assert lifecycle.status is LoadStatus.IDLE
    assert lifecycle.needs_load

    async def fetch():
        return ["a"]

    assert await lifecycle.run(fetch) == ["a"]
    assert lifecycle.status is LoadStatus.SUCCEEDED
    assert lifecycle.state.error is None
    assert not lifecycle.needs_load


@pytest.mark.asyncio
async def test_failure_records_message_and_success_clears_it():
    lifecycle = FetchLifecycle()

    async def broken():
        raise RuntimeError("mirror unreadable")

    async def fine():
        return []

    assert await lifecycle.run(broken) is None
    assert lifecycle.status is LoadStatus.FAILED
    assert lifecycle.state.error == "mirror unreadable"

    await lifecycle.run(fine)
    assert lifecycle.status is LoadStatus.SUCCEEDED
    assert lifecycle.state.error is None


@pytest.mark.asyncio
async def test_empty_error_message_gets_default():
    lifecycle = FetchLifecycle()

    async def broken():
        raise RuntimeError()

    await lifecycle.run(broken)
    assert lifecycle.state.error == DEFAULT_ERROR


@pytest.mark.asyncio
async def test_second_fetch_while_pending_is_suppressed():
    lifecycle = FetchLifecycle()
    release = asyncio.Event()
    calls = 0

    async def slow():
        nonlocal calls
        calls += 1
        await release.wait()
        return "done"

    first = asyncio.create_task(lifecycle.run(slow))
    await asyncio.sleep(0)
    assert lifecycle.status is LoadStatus.PENDING

    assert await lifecycle.run(slow) is None
    release.set()
    assert await first == "done"
    assert calls == 1


@pytest.mark.asyncio
async def test_listeners_see_every_transition():
    lifecycle = FetchLifecycle()
    seen = []
    unsubscribe = lifecycle.subscribe(lambda state: seen.append(state.status))

    async def fetch():
        return 1

    await lifecycle.run(fetch)
    unsubscribe()
    await lifecycle.run(fetch)

    assert seen == [LoadStatus.PENDING, LoadStatus.SUCCEEDED]


@pytest.mark.asyncio
async def test_cancelled_load_does_not_stay_pending():
    lifecycle = FetchLifecycle()
    release = asyncio.Event()

    async def slow():
        await release.wait()
        return "never"

    async def fine():
        return ["a"]

    task = asyncio.create_task(lifecycle.run(slow))
    await asyncio.sleep(0)
    assert lifecycle.status is LoadStatus.PENDING

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert lifecycle.status is LoadStatus.FAILED
    assert lifecycle.state.error == CANCELLED_ERROR
    assert await lifecycle.run(fine) == ["a"]
    assert lifecycle.status is LoadStatus.SUCCEEDED
