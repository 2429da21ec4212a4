"""Page truncation for timeline reads."""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator
from typing import Generic, TypeVar

T = TypeVar("T")


class BoundedStream(Generic[T]):
    """Yield at most ``limit`` items from ``source``.

    Item ``limit + 1`` is never requested, so upstream stages stop exactly
    at the page boundary. The source is closed once the bound is reached.
    After iteration ``truncated`` tells whether the page filled up.
    """

    def __init__(self, source: AsyncIterable[T], limit: int) -> None:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")
        self._source = source
        self._limit = limit
        self.count = 0

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def truncated(self) -> bool:
        return self.count == self._limit

    def __aiter__(self) -> AsyncIterator[T]:
        return self._run()

    async def _run(self) -> AsyncIterator[T]:
        iterator = aiter(self._source)
        try:
            while self.count < self._limit:
                try:
                    item = await anext(iterator)
                except StopAsyncIteration:
                    return
                self.count += 1
                yield item
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()
