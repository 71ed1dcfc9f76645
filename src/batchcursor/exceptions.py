class BatchCursorError(Exception):
    pass


class InvalidStateError(BatchCursorError, RuntimeError):
    pass


class NotSupportedError(BatchCursorError, NotImplementedError):
    pass


class IteratorDisposedError(BatchCursorError, RuntimeError):
    pass


class OperationCancelledError(BatchCursorError):
    pass


__all__ = [
    "BatchCursorError",
    "InvalidStateError",
    "NotSupportedError",
    "IteratorDisposedError",
    "OperationCancelledError",
]
