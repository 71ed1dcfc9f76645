import asyncio
import concurrent.futures
import enum
import inspect
import logging
import typing

from batchcursor.exceptions import InvalidStateError
from batchcursor.report import get_logger


class ResolutionState(enum.Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"
    ABANDONED = "abandoned"


class DeferredSource:
    """
    One-shot, memoized resolution of a batch source that is not built yet.

    Wraps an awaitable (coroutine, ``asyncio.Future``, ``asyncio.Task``) or a
    ``concurrent.futures.Future``. The pending object is awaited at most once;
    its result (or its failure) is cached and the pending object is dropped.
    """

    def __init__(
        self,
        pending: typing.Awaitable[typing.Any] | concurrent.futures.Future,
        logger: logging.Logger | None = None,
    ) -> None:
        if not (
            isinstance(pending, concurrent.futures.Future)
            or inspect.isawaitable(pending)
        ):
            raise TypeError(
                "Deferred source must be an awaitable or a "
                f"concurrent.futures.Future, got {type(pending).__name__}"
            )
        self._pending = pending
        self._state = ResolutionState.PENDING
        self._value: typing.Any = None
        self._error: BaseException | None = None
        self.logger = logger or get_logger()

    @property
    def state(self) -> ResolutionState:
        return self._state

    @property
    def is_resolved(self) -> bool:
        return self._state is ResolutionState.RESOLVED

    @property
    def is_pending(self) -> bool:
        return self._state is ResolutionState.PENDING

    @property
    def was_cancelled(self) -> bool:
        """True when the pending future was cancelled and will never resolve."""
        return self.is_pending and _is_cancelled(self._pending)

    @property
    def can_resolve_blocking(self) -> bool:
        """
        True when ``resolve()`` can produce a value without an event loop.
        """
        if self._state is not ResolutionState.PENDING:
            return True
        pending = self._pending
        if isinstance(pending, concurrent.futures.Future):
            return True
        return isinstance(pending, asyncio.Future) and pending.done()

    def resolve(self) -> typing.Any:
        """
        Resolve in blocking mode.

        Only a ``concurrent.futures.Future`` (or an already completed
        ``asyncio.Future``) can be resolved without suspending.
        """
        if self._state is not ResolutionState.PENDING:
            return self._cached()
        if not self.can_resolve_blocking:
            raise InvalidStateError(
                "Deferred source is an awaitable and can only be resolved "
                "with advance_async()"
            )
        try:
            value = self._pending.result()
        except Exception as e:
            self._fail(e)
            raise
        return self._settle(value)

    async def resolve_async(self) -> typing.Any:
        """Resolve by suspending until the pending object completes."""
        if self._state is not ResolutionState.PENDING:
            return self._cached()

        pending = self._pending
        try:
            if isinstance(pending, concurrent.futures.Future):
                value = await asyncio.wrap_future(pending)
            else:
                value = await pending
        except Exception as e:
            self._fail(e)
            raise
        except BaseException:
            # A cancelled coroutine or future cannot produce a source anymore.
            if inspect.iscoroutine(pending) or _is_cancelled(pending):
                self._state = ResolutionState.ABANDONED
                self._pending = None
            raise
        return self._settle(value)

    def abandon(self, release: typing.Callable[[typing.Any], None]) -> None:
        """
        Give up on a pending resolution without suspending.

        Whatever source the pending object eventually produces is handed to
        ``release``. A coroutine that never ran is closed so it never obtains
        a resource in the first place.
        """
        if self._state is not ResolutionState.PENDING:
            return

        pending = self._pending
        self._pending = None
        self._state = ResolutionState.ABANDONED

        if inspect.iscoroutine(pending):
            self.logger.debug("Closing deferred source coroutine before it ran")
            pending.close()
            return

        if isinstance(pending, (asyncio.Future, concurrent.futures.Future)):
            callback = self._release_when_done(release)
            if pending.done():
                callback(pending)
            else:
                self.logger.debug(
                    "Deferred source still pending, releasing it on completion"
                )
                pending.add_done_callback(callback)
            return

        self.logger.warning(
            "Deferred source %r cannot be released without awaiting it", pending
        )

    def _release_when_done(
        self, release: typing.Callable[[typing.Any], None]
    ) -> typing.Callable[[typing.Any], None]:
        def _callback(future) -> None:
            if future.cancelled() or future.exception() is not None:
                return
            release(future.result())

        return _callback

    def _cached(self) -> typing.Any:
        if self._state is ResolutionState.RESOLVED:
            return self._value
        if self._state is ResolutionState.FAILED:
            raise self._error
        raise InvalidStateError("Deferred source was abandoned before resolving")

    def _settle(self, value: typing.Any) -> typing.Any:
        self._value = value
        self._state = ResolutionState.RESOLVED
        self._pending = None
        self.logger.debug("Deferred source resolved to %r", value)
        return value

    def _fail(self, error: BaseException) -> None:
        self._error = error
        self._state = ResolutionState.FAILED
        self._pending = None

    def __repr__(self) -> str:
        return f"<DeferredSource state={self._state.value}>"


def _is_cancelled(pending: typing.Any) -> bool:
    if isinstance(pending, (asyncio.Future, concurrent.futures.Future)):
        return pending.cancelled()
    return False


__all__ = ["DeferredSource", "ResolutionState"]
