import asyncio
import concurrent.futures

import pytest

from batchcursor import DeferredSource, InvalidStateError, ResolutionState


def test_rejects_non_awaitables():
    with pytest.raises(TypeError):
        DeferredSource(object())


def test_concurrent_future_resolves_blocking_and_caches():
    future = concurrent.futures.Future()
    future.set_result("source")
    deferred = DeferredSource(future)

    assert deferred.can_resolve_blocking
    assert deferred.resolve() == "source"
    assert deferred.resolve() == "source"
    assert deferred.state is ResolutionState.RESOLVED


def test_concurrent_future_failure_is_cached():
    future = concurrent.futures.Future()
    future.set_exception(OSError("unreachable"))
    deferred = DeferredSource(future)

    with pytest.raises(OSError):
        deferred.resolve()
    with pytest.raises(OSError):
        deferred.resolve()
    assert deferred.state is ResolutionState.FAILED


@pytest.mark.asyncio
async def test_coroutine_is_awaited_once():
    calls = []

    async def build():
        calls.append(1)
        return "source"

    deferred = DeferredSource(build())
    assert not deferred.can_resolve_blocking
    with pytest.raises(InvalidStateError):
        deferred.resolve()

    assert await deferred.resolve_async() == "source"
    assert await deferred.resolve_async() == "source"
    assert deferred.resolve() == "source"
    assert calls == [1]


@pytest.mark.asyncio
async def test_resolve_async_accepts_concurrent_future():
    future = concurrent.futures.Future()
    deferred = DeferredSource(future)

    asyncio.get_running_loop().call_soon(future.set_result, "source")
    assert await deferred.resolve_async() == "source"


@pytest.mark.asyncio
async def test_completed_asyncio_future_resolves_blocking():
    future = asyncio.get_running_loop().create_future()
    future.set_result("source")
    deferred = DeferredSource(future)

    assert deferred.can_resolve_blocking
    assert deferred.resolve() == "source"


@pytest.mark.asyncio
async def test_abandon_completed_future_releases_immediately():
    released = []
    future = asyncio.get_running_loop().create_future()
    future.set_result("source")
    deferred = DeferredSource(future)

    deferred.abandon(released.append)

    assert released == ["source"]
    assert deferred.state is ResolutionState.ABANDONED
    with pytest.raises(InvalidStateError):
        await deferred.resolve_async()


@pytest.mark.asyncio
async def test_abandon_failed_future_releases_nothing():
    released = []
    future = asyncio.get_running_loop().create_future()
    deferred = DeferredSource(future)

    deferred.abandon(released.append)
    future.set_exception(RuntimeError("failed"))
    await asyncio.sleep(0)

    assert released == []
    future.exception()


def test_abandon_is_noop_once_resolved():
    released = []
    future = concurrent.futures.Future()
    future.set_result("source")
    deferred = DeferredSource(future)
    deferred.resolve()

    deferred.abandon(released.append)

    assert released == []
    assert deferred.is_resolved


@pytest.mark.asyncio
async def test_cancelled_future_is_abandoned_after_failed_wait():
    future = asyncio.get_running_loop().create_future()
    deferred = DeferredSource(future)
    future.cancel()

    assert deferred.was_cancelled
    with pytest.raises(asyncio.CancelledError):
        await deferred.resolve_async()

    assert deferred.state is ResolutionState.ABANDONED
    assert not deferred.was_cancelled
    with pytest.raises(InvalidStateError):
        await deferred.resolve_async()
