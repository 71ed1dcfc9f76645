import asyncio

from batchcursor import CancellationToken, OneTimeIterable

PAGES = [
    [{"id": 1}, {"id": 2}],
    [],
    [{"id": 3}],
    [{"id": 4}, {"id": 5}],
]


class FakePagedAPI:
    """Stands in for an HTTP API that returns one page per request."""

    def __init__(self, pages):
        self.pages = pages
        self.page = -1
        self.closed = False

    async def advance_batch_async(
        self, cancellation: CancellationToken | None = None
    ) -> bool:
        await asyncio.sleep(0.01)
        self.page += 1
        return self.page < len(self.pages)

    def advance_batch(self, cancellation: CancellationToken | None = None) -> bool:
        self.page += 1
        return self.page < len(self.pages)

    def current_batch(self) -> list:
        return self.pages[self.page]

    def dispose(self) -> None:
        self.closed = True


async def connect() -> FakePagedAPI:
    # Opening a session is itself asynchronous; the iterator awaits it lazily.
    await asyncio.sleep(0.01)
    return FakePagedAPI(PAGES)


async def main():
    records = OneTimeIterable(deferred=connect())

    async for record in records:
        print(record)


if __name__ == "__main__":
    asyncio.run(main())
