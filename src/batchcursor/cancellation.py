import threading

from batchcursor.exceptions import OperationCancelledError


class CancellationToken:
    """
    Cooperative cancellation signal handed to batch sources.

    Iterators never inspect the token themselves; they forward it unchanged
    to every batch retrieval call and let the source decide when to stop.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("Operation was cancelled")

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or until ``timeout`` seconds elapse."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        return f"<CancellationToken cancelled={self.is_cancelled}>"


__all__ = ["CancellationToken"]
