"""Roots engine: relevance-filtered, resumable timeline of thread roots.

The engine reads the roots index (one row per bump, keyed by timestamp and
root key), resolves each bump to its thread root and keeps the roots the
viewer should see.

Request Flow:
    1. Load the follow graph, then the subscriptions → fail fast, no retry
    2. Open the index (wrapped in ResumableStream for historical reads)
    3. Bump filter → cheap relevance check on the bumping entry
    4. Root lookup → the entry itself, or the LookupCache / entry store
    5. Root filter → private roots dropped, forced display, per-read dedup
    6. Thread summary → merged onto the root, failure aborts the read
    7. Pagination → at most ``limit`` roots, then a Marker if truncated

Every stage is an async generator, so the pipeline is pulled by the
consumer one item at a time and nothing runs before the first item is
requested. Per-read state lives in a ReadState; the LookupCache is the
only state shared between reads.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

from ..core.config import RootsConfig
from ..core.exceptions import ThreadSummaryError
from ..core.protocols import (
    EntryStore,
    GraphStore,
    IndexStore,
    SubscriptionStore,
    ThreadSummarizer,
)
from ..models import Entry, IndexItem, Marker, RelevanceRecord, Root, marker_timestamp
from .cache import LookupCache
from .paginator import BoundedStream
from .relevance import RelevanceFilter
from .resumable import ResumableStream
from .telemetry import log_read_complete, log_read_started, log_thread_summary_failed


@dataclass
class ReadState:
    """Mutable state of a single read invocation."""

    seen: set[str] = field(default_factory=set)
    included: set[str] = field(default_factory=set)
    latest_timestamp: float | None = None


@dataclass(frozen=True)
class Bump:
    """Index row that passed the bump filter, with its resolved root."""

    item: IndexItem
    record: RelevanceRecord
    root: Entry

    @property
    def entry(self) -> Entry:
        return self.item.value

    @property
    def is_reply(self) -> bool:
        return self.entry.key != self.root.key

    @property
    def forces_display(self) -> bool:
        return self.is_reply and self.record.forces_display


@asynccontextmanager
async def _closing(stream: Any) -> AsyncIterator[Any]:
    try:
        yield stream
    finally:
        aclose = getattr(stream, "aclose", None)
        if aclose is not None:
            await aclose()


def _is_sync(item: Any) -> bool:
    return getattr(item, "sync", False) is True


class RootsEngine:
    """Timeline of thread roots for a set of viewer identities."""

    def __init__(
        self,
        *,
        index: IndexStore,
        entries: EntryStore,
        graph: GraphStore,
        subscriptions: SubscriptionStore,
        threads: ThreadSummarizer,
        self_id: str,
        cache: LookupCache | None = None,
        config: RootsConfig | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            index: Secondary index of root bumps
            entries: Raw entry store used to resolve roots
            graph: Follow graph store
            subscriptions: Channel subscription store
            threads: Thread summarizer
            self_id: Identity used when a read names no viewers
            cache: Root lookup cache (defaults to one sized by config)
            config: Engine configuration (defaults to RootsConfig())
        """
        self._config = config or RootsConfig()
        self._index = index
        self._entries = entries
        self._graph = graph
        self._subscriptions = subscriptions
        self._threads = threads
        self._self_id = self_id
        # Shared across every read for the lifetime of the engine
        self._cache = cache or LookupCache(self._config.cache_capacity)

    @property
    def cache(self) -> LookupCache:
        return self._cache

    @property
    def config(self) -> RootsConfig:
        return self._config

    def latest(self, ids: Sequence[str] | None = None) -> AsyncIterator[Root]:
        """Live stream of newly bumped roots relevant to the viewers.

        Not resumable and never ends on its own. Roots are not summarised
        and not de-duplicated: every bump is a live event.
        """
        return self._latest(self._viewer_ids(ids))

    def read(
        self,
        *,
        ids: Sequence[str] | None = None,
        reverse: bool = False,
        limit: int | None = None,
        lt: float | Marker | Mapping[str, Any] | None = None,
        gt: float | Marker | Mapping[str, Any] | None = None,
    ) -> AsyncIterator[Root | Marker]:
        """Historical page of relevant roots.

        Args:
            ids: Viewer identities (defaults to the engine's own identity)
            reverse: Read newest first
            limit: Maximum number of roots; a Marker follows a full page
            lt: Only bumps strictly before this timestamp or Marker (or its dump)
            gt: Only bumps strictly after this timestamp or Marker (or its dump)

        Returns:
            Lazy stream of roots, optionally ending with a Marker

        Raises:
            ValueError: If limit or a bound is invalid
        """
        if limit is not None and (
            isinstance(limit, bool) or not isinstance(limit, int) or limit < 1
        ):
            raise ValueError(f"limit must be a positive integer, got {limit!r}")
        return self._read(
            ids=self._viewer_ids(ids),
            reverse=reverse,
            limit=limit,
            lt=marker_timestamp(lt),
            gt=marker_timestamp(gt),
        )

    def _viewer_ids(self, ids: Sequence[str] | None) -> list[str]:
        if ids is None:
            return [self._self_id]
        if isinstance(ids, str):
            return [ids]
        return list(ids)

    async def _latest(self, ids: list[str]) -> AsyncIterator[Root]:
        log_read_started(mode="latest", viewer_count=len(ids))
        relevance = await RelevanceFilter.load(self._graph, self._subscriptions)

        bumps = self._lookup_roots(
            self._bump_filter(self._index.open_read({"old": False}), ids, relevance)
        )
        async with _closing(bumps):
            async for bump in bumps:
                if bump.root.private:
                    continue
                if bump.forces_display:
                    record = bump.record.as_forced()
                else:
                    record = relevance.evaluate(ids, bump.root)
                    if record is None:
                        continue
                yield Root.from_entry(bump.root, record)

    async def _read(
        self,
        *,
        ids: list[str],
        reverse: bool,
        limit: int | None,
        lt: float | None,
        gt: float | None,
    ) -> AsyncIterator[Root | Marker]:
        log_read_started(
            mode="read", viewer_count=len(ids), reverse=reverse, limit=limit, lt=lt, gt=gt
        )
        relevance = await RelevanceFilter.load(self._graph, self._subscriptions)

        opts: dict[str, Any] = {"reverse": reverse, "old": True}
        if lt is not None:
            opts["lt"] = lt
        if gt is not None:
            opts["gt"] = gt

        state = ReadState()
        index = aiter(
            ResumableStream(self._index.open_read, opts, reverse=reverse, retry=self._config.retry)
        )
        roots = self._annotate(
            self._filter_roots(
                self._lookup_roots(self._bump_filter(index, ids, relevance, state)),
                ids,
                relevance,
                state,
            )
        )

        if limit is None:
            emitted = 0
            async with _closing(roots):
                async for root in roots:
                    emitted += 1
                    yield root
            log_read_complete(emitted=emitted, truncated=False)
            return

        page = BoundedStream(roots, limit)
        page_roots = aiter(page)
        async with _closing(page_roots):
            async for root in page_roots:
                yield root

        if page.truncated:
            # Resume point for the next page
            yield Marker(timestamp=state.latest_timestamp)
        log_read_complete(
            emitted=page.count,
            truncated=page.truncated,
            marker_timestamp=state.latest_timestamp if page.truncated else None,
        )

    async def _bump_filter(
        self,
        items: AsyncIterable[Any],
        ids: list[str],
        relevance: RelevanceFilter,
        state: ReadState | None = None,
    ) -> AsyncIterator[tuple[IndexItem, RelevanceRecord]]:
        async with _closing(items):
            async for item in items:
                if _is_sync(item):
                    continue
                if state is not None:
                    state.latest_timestamp = item.key.timestamp
                record = relevance.evaluate(ids, item.value)
                if record is not None:
                    yield item, record

    async def _lookup_roots(
        self, bumps: AsyncIterable[tuple[IndexItem, RelevanceRecord]]
    ) -> AsyncIterator[Bump]:
        async with _closing(bumps):
            async for item, record in bumps:
                entry = item.value
                root_key = item.key.root_key
                if root_key == entry.key:
                    root: Entry | None = entry
                else:
                    root = await self._cache.resolve(root_key, self._entries.get)
                if root is None:
                    continue
                yield Bump(item=item, record=record, root=root)

    async def _filter_roots(
        self,
        bumps: AsyncIterable[Bump],
        ids: list[str],
        relevance: RelevanceFilter,
        state: ReadState,
    ) -> AsyncIterator[Root]:
        async with _closing(bumps):
            async for bump in bumps:
                root = bump.root
                if root.key in state.included or root.private:
                    continue

                if bump.forces_display:
                    # Keep the bump reasons so the reply context can be shown
                    state.included.add(root.key)
                    yield Root.from_entry(root, bump.record.as_forced())
                    continue

                if root.key in state.seen:
                    continue
                state.seen.add(root.key)
                record = relevance.evaluate(ids, root)
                if record is not None:
                    state.included.add(root.key)
                    yield Root.from_entry(root, record)

    async def _annotate(self, roots: AsyncIterable[Root]) -> AsyncIterator[Root]:
        async with _closing(roots):
            async for root in roots:
                try:
                    summary = await self._threads.summary(root.key, self._config.summary_limit)
                    annotated = root.with_summary(summary)
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    log_thread_summary_failed(root_key=root.key, error=exc)
                    raise ThreadSummaryError(
                        f"Thread summary failed for {root.key}: {exc}", root_key=root.key
                    ) from exc
                yield annotated
