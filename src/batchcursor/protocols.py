from typing import Any, Protocol, Sequence, runtime_checkable

from batchcursor.cancellation import CancellationToken


@runtime_checkable
class BatchSourceProtocol(Protocol):
    """
    Protocol defining the blocking interface of a batch source.

    Any object implementing this protocol can be wrapped by a
    BatchItemIterator.
    """

    def advance_batch(self, cancellation: CancellationToken | None = None) -> bool:
        """Move to the next batch. Returns False once the source is exhausted."""
        ...

    def current_batch(self) -> Sequence[Any]:
        """Return the batch made current by the last successful advance."""
        ...

    def dispose(self) -> None:
        """Release the underlying resource. Must be idempotent."""
        ...


@runtime_checkable
class AsyncBatchSourceProtocol(Protocol):
    """
    Protocol defining the suspending interface of a batch source.

    Sources implementing it can be driven with ``advance_async`` and
    ``async for``.
    """

    async def advance_batch_async(
        self, cancellation: CancellationToken | None = None
    ) -> bool: ...

    def current_batch(self) -> Sequence[Any]: ...


__all__ = ["BatchSourceProtocol", "AsyncBatchSourceProtocol"]
