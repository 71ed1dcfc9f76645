import inspect
import typing

from batchcursor.exceptions import InvalidStateError
from batchcursor.iterator import BatchItemIterator


class OneTimeIterable:
    """
    Iterable view over a batch source that can be consumed only once.

    A batch source is a forward-only cursor, so a second pass would silently
    yield nothing. Instead, iterating again raises ``InvalidStateError``.
    The underlying iterator is disposed when iteration ends, including on
    ``break`` or error once the generator is closed.
    """

    def __init__(self, source: typing.Any = None, **iterator_kwargs: typing.Any):
        """
        Initialize the OneTimeIterable.

        Args:
            source: A batch source. Omit it and pass ``deferred=`` instead
                for a source that is not built yet.
            **iterator_kwargs: Forwarded to ``BatchItemIterator``.
        """
        self._source = source
        self._iterator_kwargs = iterator_kwargs
        self._consumed = False

    @property
    def is_consumed(self) -> bool:
        return self._consumed

    def _take(self) -> BatchItemIterator:
        if self._consumed:
            raise InvalidStateError(
                f"{type(self).__name__} can only be iterated once"
            )
        self._consumed = True
        source, self._source = self._source, None
        return BatchItemIterator(source, **self._iterator_kwargs)

    def __iter__(self) -> typing.Generator[typing.Any, None, None]:
        return self._drain(self._take())

    def __aiter__(self) -> typing.AsyncGenerator[typing.Any, None]:
        return self._drain_async(self._take())

    @staticmethod
    def _drain(
        iterator: BatchItemIterator,
    ) -> typing.Generator[typing.Any, None, None]:
        with iterator:
            yield from iterator

    @staticmethod
    async def _drain_async(
        iterator: BatchItemIterator,
    ) -> typing.AsyncGenerator[typing.Any, None]:
        async with iterator:
            async for item in iterator:
                yield item

    def __repr__(self) -> str:
        return f"<{type(self).__name__} consumed={self._consumed}>"


def to_list(source: typing.Any = None, **iterator_kwargs: typing.Any) -> list:
    """Drain a batch source into a list."""
    with BatchItemIterator(source, **iterator_kwargs) as iterator:
        return list(iterator)


async def to_list_async(
    source: typing.Any = None, **iterator_kwargs: typing.Any
) -> list:
    async with BatchItemIterator(source, **iterator_kwargs) as iterator:
        return [item async for item in iterator]


def first(source: typing.Any = None, **iterator_kwargs: typing.Any) -> typing.Any:
    """
    Return the first item of a batch source and release it.

    Raises:
        InvalidStateError: If the source yields no items at all.
    """
    with BatchItemIterator(source, **iterator_kwargs) as iterator:
        if not iterator.advance():
            raise InvalidStateError("Batch source contains no items")
        return iterator.current


async def first_async(
    source: typing.Any = None, **iterator_kwargs: typing.Any
) -> typing.Any:
    async with BatchItemIterator(source, **iterator_kwargs) as iterator:
        if not await iterator.advance_async():
            raise InvalidStateError("Batch source contains no items")
        return iterator.current


def first_or_default(
    source: typing.Any = None,
    default: typing.Any = None,
    **iterator_kwargs: typing.Any,
) -> typing.Any:
    with BatchItemIterator(source, **iterator_kwargs) as iterator:
        if not iterator.advance():
            return default
        return iterator.current


def for_each(
    source: typing.Any,
    func: typing.Callable[[typing.Any], typing.Any],
    **iterator_kwargs: typing.Any,
) -> int:
    """
    Call ``func`` on every item in order.

    Returns:
        The number of items processed.
    """
    count = 0
    with BatchItemIterator(source, **iterator_kwargs) as iterator:
        for item in iterator:
            func(item)
            count += 1
    return count


async def for_each_async(
    source: typing.Any,
    func: typing.Callable[[typing.Any], typing.Any],
    **iterator_kwargs: typing.Any,
) -> int:
    """
    Async version of ``for_each``. ``func`` may be sync or async.
    """
    count = 0
    async with BatchItemIterator(source, **iterator_kwargs) as iterator:
        async for item in iterator:
            result = func(item)
            if inspect.isawaitable(result):
                await result
            count += 1
    return count


__all__ = [
    "OneTimeIterable",
    "to_list",
    "to_list_async",
    "first",
    "first_async",
    "first_or_default",
    "for_each",
    "for_each_async",
]
