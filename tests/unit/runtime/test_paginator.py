"""Unit tests for BoundedStream."""

from __future__ import annotations

import pytest

from threadline.roots.runtime import BoundedStream


class CountingSource:
    def __init__(self, size: int) -> None:
        self.size = size
        self.pulled = 0
        self.closed = False

    async def stream(self):
        try:
            for n in range(self.size):
                self.pulled += 1
                yield n
        finally:
            self.closed = True


@pytest.mark.asyncio
async def test_truncates_without_pulling_past_limit():
    source = CountingSource(5)
    page = BoundedStream(source.stream(), 3)

    items = [item async for item in page]

    assert items == [0, 1, 2]
    assert page.count == 3
    assert page.truncated
    assert source.pulled == 3
    assert source.closed


@pytest.mark.asyncio
async def test_short_source_is_not_truncated():
    source = CountingSource(2)
    page = BoundedStream(source.stream(), 3)

    items = [item async for item in page]

    assert items == [0, 1]
    assert page.count == 2
    assert not page.truncated


@pytest.mark.asyncio
async def test_exact_fit_counts_as_truncated():
    page = BoundedStream(CountingSource(3).stream(), 3)

    items = [item async for item in page]

    assert items == [0, 1, 2]
    assert page.truncated


@pytest.mark.parametrize("limit", [0, -1, 2.5, True, None])
def test_rejects_invalid_limit(limit):
    with pytest.raises(ValueError, match="limit"):
        BoundedStream(CountingSource(1).stream(), limit)
