"""Resumable stream adapter for chunked or flaky backing reads.

The adapter turns a factory that opens a lazy stream from a set of
position options into one continuous stream that survives backing
failures without losing or duplicating progress.

Architecture:
    - Watermark: the last non-sync item yielded. Every re-opened
      sub-stream starts strictly after it (``gt`` for forward reads,
      ``lt`` for reverse reads).
    - Chunked sources: a sub-stream that ends normally after yielding new
      items is followed by another one opened from the watermark. A
      sub-stream that ends without yielding anything new marks the end of
      data (watermark becomes ``ENDED``).
    - Failures: the failed sub-stream is discarded and a new one is
      opened from the watermark after a backoff delay. The retry policy
      decides when to give up; ``RetryPolicy(max_attempts=None)`` retries
      forever.
    - Sync markers: passed through untouched; they move neither the
      watermark nor the per-attempt item count.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, AsyncIterator, Callable, Mapping
from typing import Any, Generic, TypeVar

from ..core.config import RetryPolicy
from ..core.exceptions import RetryExhaustedError
from .telemetry import log_index_ended, log_index_retry

T = TypeVar("T")


class _Ended:
    def __repr__(self) -> str:
        return "ENDED"


ENDED: Any = _Ended()


def _default_position(item: Any) -> Any:
    return item.position


def _default_is_sync(item: Any) -> bool:
    if isinstance(item, Mapping):
        return item.get("sync") is True
    return getattr(item, "sync", False) is True


class ResumableStream(Generic[T]):
    """Continuous stream over re-creatable sub-streams.

    Example:
        >>> stream = ResumableStream(index.open_read, {"reverse": True, "old": True})
        >>> async for item in stream:
        ...     handle(item)
    """

    def __init__(
        self,
        create_stream: Callable[[dict[str, Any]], AsyncIterable[T]],
        opts: Mapping[str, Any],
        *,
        reverse: bool | None = None,
        direction: str | None = None,
        retry: RetryPolicy | None = None,
        position: Callable[[T], Any] | None = None,
        is_sync: Callable[[T], bool] | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            create_stream: Factory opening a sub-stream from position options
            opts: Base options; copied for every sub-stream, never mutated
            reverse: Read direction (defaults to ``opts["reverse"]``)
            direction: Option key used to resume ("lt" or "gt"); derived
                from the read direction when omitted
            retry: Retry policy for failing sub-streams
            position: Maps an item to the value stored under ``direction``
            is_sync: Predicate recognising sync markers
        """
        if reverse is None:
            reverse = bool(opts.get("reverse", False))
        direction = direction or ("lt" if reverse else "gt")
        if direction not in ("lt", "gt"):
            raise ValueError(f"direction must be 'lt' or 'gt', got {direction!r}")

        self._create_stream = create_stream
        self._opts = dict(opts)
        self._direction = direction
        self._retry = retry or RetryPolicy()
        self._position = position or _default_position
        self._is_sync = is_sync or _default_is_sync

        self._watermark: Any = None
        self._failures = 0
        self._attempts = 0
        self._items = 0

    @property
    def direction(self) -> str:
        return self._direction

    @property
    def watermark(self) -> Any:
        """Last non-sync item yielded, ``ENDED`` once exhausted, or None."""
        return self._watermark

    @property
    def ended(self) -> bool:
        return self._watermark is ENDED

    @property
    def attempts(self) -> int:
        """Number of sub-streams opened so far."""
        return self._attempts

    def __aiter__(self) -> AsyncIterator[T]:
        return self._run()

    async def _run(self) -> AsyncIterator[T]:
        while self._watermark is not ENDED:
            opts = dict(self._opts)
            resuming = self._watermark is not None
            boundary = self._position(self._watermark) if resuming else None
            if resuming:
                opts[self._direction] = boundary

            self._attempts += 1
            count = 0
            failure: Exception | None = None
            stream: AsyncIterable[T] | None = None
            try:
                items: AsyncIterator[T] | None = None
                try:
                    stream = self._create_stream(opts)
                    items = aiter(stream)
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    failure = exc

                # Only errors raised by the backing read are retried
                while items is not None and failure is None:
                    try:
                        item = await anext(items)
                    except StopAsyncIteration:
                        break
                    except asyncio.CancelledError:
                        raise
                    except Exception as exc:
                        failure = exc
                        break

                    if self._is_sync(item):
                        yield item
                        continue
                    # Inclusive sources hand the boundary item back first
                    if resuming and count == 0 and self._position(item) == boundary:
                        continue
                    count += 1
                    self._items += 1
                    self._failures = 0
                    self._watermark = item
                    yield item
            finally:
                aclose = getattr(stream, "aclose", None)
                if aclose is not None:
                    await aclose()

            if failure is not None:
                self._failures += 1
                if not self._retry.allows(self._failures):
                    raise RetryExhaustedError(
                        f"Index read failed {self._failures} times in a row: {failure}",
                        attempts=self._failures,
                        watermark=boundary,
                    ) from failure
                delay = self._retry.delay(self._failures)
                log_index_retry(
                    attempt=self._failures,
                    delay=delay,
                    watermark=boundary,
                    error=failure,
                )
                if delay > 0:
                    await asyncio.sleep(delay)
                continue

            if count == 0:
                self._watermark = ENDED
                log_index_ended(items=self._items, sub_streams=self._attempts)
