import collections.abc
import typing

from batchcursor.cancellation import CancellationToken
from batchcursor.exceptions import InvalidStateError, NotSupportedError


class InMemoryBatchSource:
    """
    Serves a fixed list of batches.

    Useful as a stand-in for a real cursor: it supports both retrieval
    modes, honours the cancellation token and records how it was used.
    """

    def __init__(self, batches: typing.Iterable[typing.Sequence[typing.Any]]):
        """
        Initialize the InMemoryBatchSource.

        Args:
            batches: Batches to serve, in order. Empty batches are allowed.
        """
        self.batches = [list(batch) for batch in batches]
        self.advance_calls = 0
        self.dispose_calls = 0
        self._position = -1
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def advance_batch(self, cancellation: CancellationToken | None = None) -> bool:
        if self._disposed:
            raise InvalidStateError("Batch source has been disposed")
        if cancellation is not None:
            cancellation.raise_if_cancelled()

        self.advance_calls += 1
        if self._position + 1 >= len(self.batches):
            self._position = len(self.batches)
            return False
        self._position += 1
        return True

    async def advance_batch_async(
        self, cancellation: CancellationToken | None = None
    ) -> bool:
        return self.advance_batch(cancellation)

    def current_batch(self) -> list[typing.Any]:
        if not 0 <= self._position < len(self.batches):
            raise InvalidStateError("No current batch")
        return self.batches[self._position]

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self.dispose_calls += 1

    def __repr__(self) -> str:
        return f"<InMemoryBatchSource batches={len(self.batches)}>"


class GeneratorBatchSource:
    """
    Bridges Python iterables and async iterables of batches into a source.

    A plain iterable can be driven in both modes. An async iterable can only
    be driven with the suspending API.
    """

    def __init__(
        self,
        iterable: typing.Iterable[typing.Iterable[typing.Any]]
        | typing.AsyncIterable[typing.Iterable[typing.Any]],
    ):
        if isinstance(iterable, collections.abc.AsyncIterable):
            self._aiterator = aiter(iterable)
            self._iterator = None
        else:
            self._aiterator = None
            self._iterator = iter(iterable)
        self._current: typing.Sequence[typing.Any] | None = None
        self._disposed = False

    @property
    def is_async(self) -> bool:
        return self._aiterator is not None

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def advance_batch(self, cancellation: CancellationToken | None = None) -> bool:
        self._check_usable(cancellation)
        if self._iterator is None:
            raise NotSupportedError(
                "Async iterables can only be consumed with advance_batch_async()"
            )
        try:
            batch = next(self._iterator)
        except StopIteration:
            self._current = None
            return False
        self._current = self._as_sequence(batch)
        return True

    async def advance_batch_async(
        self, cancellation: CancellationToken | None = None
    ) -> bool:
        if self._aiterator is None:
            return self.advance_batch(cancellation)

        self._check_usable(cancellation)
        try:
            batch = await anext(self._aiterator)
        except StopAsyncIteration:
            self._current = None
            return False
        self._current = self._as_sequence(batch)
        return True

    def current_batch(self) -> typing.Sequence[typing.Any]:
        if self._current is None:
            raise InvalidStateError("No current batch")
        return self._current

    def dispose(self) -> None:
        """
        Close the wrapped generator.

        An async generator cannot be closed without suspending; it is only
        dropped here and left to the event loop's finalizer.
        """
        if self._disposed:
            return
        self._disposed = True
        self._current = None
        close = getattr(self._iterator, "close", None)
        if close is not None:
            close()
        self._iterator = None
        self._aiterator = None

    async def dispose_async(self) -> None:
        if self._disposed:
            return
        aclose = getattr(self._aiterator, "aclose", None)
        self.dispose()
        if aclose is not None:
            await aclose()

    def _check_usable(self, cancellation: CancellationToken | None) -> None:
        if self._disposed:
            raise InvalidStateError("Batch source has been disposed")
        if cancellation is not None:
            cancellation.raise_if_cancelled()

    @staticmethod
    def _as_sequence(batch: typing.Iterable[typing.Any]) -> typing.Sequence[typing.Any]:
        if isinstance(batch, collections.abc.Sequence):
            return batch
        return list(batch)

    def __repr__(self) -> str:
        mode = "async" if self.is_async else "sync"
        return f"<GeneratorBatchSource mode={mode}>"


__all__ = ["InMemoryBatchSource", "GeneratorBatchSource"]
