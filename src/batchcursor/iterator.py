import concurrent.futures
import logging
import operator
import typing

from batchcursor.cancellation import CancellationToken
from batchcursor.config import IteratorConfig
from batchcursor.deferred import DeferredSource
from batchcursor.exceptions import (
    InvalidStateError,
    IteratorDisposedError,
    NotSupportedError,
)
from batchcursor.protocols import BatchSourceProtocol
from batchcursor.report import get_logger
from batchcursor.structs import IteratorState, IteratorStats

_NO_ITEM = object()


class BatchItemIterator:
    """
    Pull-based, one-item-at-a-time iterator over a batch source.

    The source delivers items in batches; this iterator walks each batch in
    order, skips empty batches and stops when the source reports exhaustion.
    It can be driven in blocking mode (``advance()``, ``for``) or in
    suspending mode (``await advance_async()``, ``async for``), but a given
    instance must stick to one mode and one consumer. No locking is done.

    The source may also be deferred: pass an awaitable or a
    ``concurrent.futures.Future`` as ``deferred`` and it is resolved on first
    use, at most once. Disposal always releases whatever source ends up being
    obtained, even when disposal comes first.
    """

    def __init__(
        self,
        source: BatchSourceProtocol | None = None,
        *,
        deferred: typing.Awaitable[typing.Any]
        | concurrent.futures.Future
        | DeferredSource
        | None = None,
        cancellation: CancellationToken | None = None,
        logger: logging.Logger | None = None,
        config: IteratorConfig | None = None,
    ) -> None:
        """
        Initialize the iterator.

        Args:
            source: A batch source that is already available.
            deferred: A pending batch source, resolved on first use.
            cancellation: Token forwarded unchanged to every batch retrieval.
            logger: Optional custom logger.
            config: Iterator options. Defaults to ``IteratorConfig()``.
        """
        if (source is None) == (deferred is None):
            raise ValueError("Provide exactly one of 'source' or 'deferred'")

        self.config = config or IteratorConfig()
        self.logger = logger or get_logger(self.config.logger_name)
        self._source = source
        self._deferred: DeferredSource | None = None
        if deferred is not None:
            if not isinstance(deferred, DeferredSource):
                deferred = DeferredSource(deferred, logger=self.logger)
            self._deferred = deferred
        self._cancellation = cancellation
        self._batch_iterator: typing.Iterator[typing.Any] | None = None
        self._current: typing.Any = _NO_ITEM
        self._state = IteratorState.NOT_STARTED
        self._stats = IteratorStats()

    @classmethod
    def from_deferred(
        cls,
        deferred: typing.Awaitable[typing.Any] | concurrent.futures.Future,
        **kwargs: typing.Any,
    ) -> "BatchItemIterator":
        return cls(deferred=deferred, **kwargs)

    @property
    def state(self) -> IteratorState:
        return self._state

    @property
    def stats(self) -> IteratorStats:
        return self._stats

    @property
    def is_disposed(self) -> bool:
        return self._state is IteratorState.DISPOSED

    @property
    def supports_async(self) -> bool:
        """
        Whether the suspending surface can be used.

        A deferred source is assumed to be suspending until it is resolved.
        """
        if self._source is None:
            return self._deferred is not None
        return hasattr(self._source, "advance_batch_async")

    @property
    def current(self) -> typing.Any:
        """The item the iterator is positioned on."""
        self._raise_if_disposed()
        if self._state is IteratorState.NOT_STARTED:
            raise InvalidStateError("Iteration has not started. Call advance().")
        if self._state is IteratorState.FINISHED:
            raise InvalidStateError("Iteration already finished.")
        if self._current is _NO_ITEM:
            raise InvalidStateError("Iterator is not positioned on an item.")
        return self._current

    def advance(self) -> bool:
        """
        Move to the next item, pulling batches from the source as needed.

        Returns:
            True if the iterator is now positioned on an item, False once the
            source is exhausted.
        """
        self._raise_if_disposed()
        if self._step_within_batch():
            return True
        if self._state is IteratorState.FINISHED:
            return False

        source = self._obtain_source()
        while True:
            if not source.advance_batch(cancellation=self._cancellation):
                return self._finish()
            if self._install_batch(source.current_batch()):
                return True

    async def advance_async(self) -> bool:
        """Suspending counterpart of ``advance()``."""
        self._raise_if_disposed()
        if self._step_within_batch():
            return True
        if self._state is IteratorState.FINISHED:
            return False

        source = await self._obtain_source_async()
        if not hasattr(source, "advance_batch_async"):
            raise NotSupportedError(
                f"{type(source).__name__} does not support suspending retrieval"
            )
        while True:
            if not await source.advance_batch_async(cancellation=self._cancellation):
                return self._finish()
            if self._install_batch(source.current_batch()):
                return True

    def reset(self) -> None:
        self._raise_if_disposed()
        raise NotSupportedError("Batch sources cannot be rewound")

    def dispose(self) -> None:
        """
        Release the batch iterator, then the source. Idempotent.

        A deferred source that is still pending is released as soon as it
        completes; a coroutine that never ran is closed instead.
        """
        if self._state is IteratorState.DISPOSED:
            return
        self._adopt_resolved_source()
        deferred = self._deferred
        source = self._mark_disposed()
        if deferred is not None:
            deferred.abandon(operator.methodcaller("dispose"))
        if source is not None:
            source.dispose()

    async def dispose_async(self) -> None:
        """
        Suspending counterpart of ``dispose()``.

        A pending deferred source is resolved first so that the resource it
        produces is released here rather than leaked.
        """
        if self._state is IteratorState.DISPOSED:
            return
        self._adopt_resolved_source()
        deferred = self._deferred
        if deferred is not None and deferred.is_pending and not deferred.was_cancelled:
            self.logger.debug("Resolving deferred source before disposal")
            try:
                await self._obtain_source_async()
            except BaseException:
                self.dispose()
                raise

        source = self._mark_disposed()
        if source is None:
            return
        dispose_async = getattr(source, "dispose_async", None)
        if dispose_async is not None:
            await dispose_async()
        else:
            source.dispose()

    def _step_within_batch(self) -> bool:
        if self._state is IteratorState.NOT_STARTED:
            self._state = IteratorState.ACTIVE
        self._current = _NO_ITEM
        if self._batch_iterator is None:
            return False

        item = next(self._batch_iterator, _NO_ITEM)
        if item is _NO_ITEM:
            return False
        self._current = item
        self._stats.items_yielded += 1
        return True

    def _install_batch(self, batch: typing.Iterable[typing.Any]) -> bool:
        self._release_batch_iterator()
        self._batch_iterator = iter(batch)
        self._stats.batches_fetched += 1
        self.logger.debug("Fetched batch #%d", self._stats.batches_fetched)

        if self._step_within_batch():
            return True
        self._stats.empty_batches += 1
        self.logger.debug("Skipping empty batch #%d", self._stats.batches_fetched)
        return False

    def _finish(self) -> bool:
        self._release_batch_iterator()
        self._state = IteratorState.FINISHED
        self.logger.debug(
            "Batch source exhausted after %d batches, %d items",
            self._stats.batches_fetched,
            self._stats.items_yielded,
        )
        return False

    def _obtain_source(self) -> BatchSourceProtocol:
        if self._source is None:
            self._source = self._deferred.resolve()
            self._deferred = None
        return self._source

    async def _obtain_source_async(self) -> typing.Any:
        if self._source is None:
            self._source = await self._deferred.resolve_async()
            self._deferred = None
        return self._source

    def _adopt_resolved_source(self) -> None:
        if self._source is None and self._deferred is not None:
            if self._deferred.is_resolved:
                self._source = self._deferred.resolve()
                self._deferred = None

    def _mark_disposed(self) -> typing.Any:
        self._state = IteratorState.DISPOSED
        self._current = _NO_ITEM
        self._release_batch_iterator()
        self._deferred = None
        source, self._source = self._source, None
        self.logger.debug("Disposing %s", self)
        return source

    def _release_batch_iterator(self) -> None:
        batch_iterator, self._batch_iterator = self._batch_iterator, None
        if batch_iterator is None or not self.config.close_batch_iterators:
            return
        close = getattr(batch_iterator, "close", None)
        if close is not None:
            close()

    def _raise_if_disposed(self) -> None:
        if self._state is IteratorState.DISPOSED:
            raise IteratorDisposedError(f"{type(self).__name__} has been disposed")

    def __iter__(self) -> "BatchItemIterator":
        return self

    def __next__(self) -> typing.Any:
        if self.advance():
            return self._current
        raise StopIteration

    def __aiter__(self) -> "BatchItemIterator":
        return self

    async def __anext__(self) -> typing.Any:
        if await self.advance_async():
            return self._current
        raise StopAsyncIteration

    def __enter__(self) -> "BatchItemIterator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()
        return False

    async def __aenter__(self) -> "BatchItemIterator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.dispose_async()

    def __del__(self) -> None:
        try:
            if self._state is IteratorState.DISPOSED:
                return
            if self._source is None and self._deferred is None:
                return
            if self.config.warn_on_undisposed:
                self.logger.warning(
                    "%s collected without being disposed. Disposing...",
                    type(self).__name__,
                )
            self.dispose()
        except (ImportError, AttributeError, NameError):
            pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} state={self._state.value}>"


__all__ = ["BatchItemIterator"]
