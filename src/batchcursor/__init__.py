from batchcursor.cancellation import CancellationToken
from batchcursor.config import IteratorConfig
from batchcursor.deferred import DeferredSource, ResolutionState
from batchcursor.enumerable import (
    OneTimeIterable,
    first,
    first_async,
    first_or_default,
    for_each,
    for_each_async,
    to_list,
    to_list_async,
)
from batchcursor.exceptions import (
    BatchCursorError,
    InvalidStateError,
    IteratorDisposedError,
    NotSupportedError,
    OperationCancelledError,
)
from batchcursor.iterator import BatchItemIterator
from batchcursor.protocols import AsyncBatchSourceProtocol, BatchSourceProtocol
from batchcursor.report import get_logger
from batchcursor.sources import GeneratorBatchSource, InMemoryBatchSource
from batchcursor.structs import IteratorState, IteratorStats

__all__ = [
    "BatchItemIterator",
    "IteratorState",
    "IteratorStats",
    "IteratorConfig",
    "CancellationToken",
    "DeferredSource",
    "ResolutionState",
    "BatchSourceProtocol",
    "AsyncBatchSourceProtocol",
    "get_logger",
    # Errors
    "BatchCursorError",
    "InvalidStateError",
    "NotSupportedError",
    "IteratorDisposedError",
    "OperationCancelledError",
    # Sources
    "InMemoryBatchSource",
    "GeneratorBatchSource",
    # Consumption helpers
    "OneTimeIterable",
    "to_list",
    "to_list_async",
    "first",
    "first_async",
    "first_or_default",
    "for_each",
    "for_each_async",
]
