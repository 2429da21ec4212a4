"""In-memory collaborators for the roots engine.

These implement the collaborator protocols on plain Python structures.
They back the test-suite and the examples, and are good enough for
embedding a small timeline in a single process.
"""

from __future__ import annotations

import asyncio
import bisect
import time
from collections.abc import AsyncIterator, Iterable
from typing import Any

from ..core.channels import normalize_channel
from ..core.protocols import FollowState, Subscriptions
from ..models import Entry, IndexItem, IndexKey, SyncMarker, ThreadSummary

VOTE_TYPE = "vote"


def _before(position: tuple[float, int], bound: Any) -> bool:
    if isinstance(bound, (tuple, list)):
        return position < tuple(bound)
    return position[0] < bound


def _after(position: tuple[float, int], bound: Any) -> bool:
    if isinstance(bound, (tuple, list)):
        return position > tuple(bound)
    return position[0] > bound


def _in_bounds(position: tuple[float, int], lt: Any, gt: Any) -> bool:
    if lt is not None and not _before(position, lt):
        return False
    if gt is not None and not _after(position, gt):
        return False
    return True


class InMemoryIndex:
    """Roots index ordered by ``(timestamp, seq)``."""

    def __init__(self) -> None:
        self._items: list[IndexItem] = []
        # Arrival order, for live readers
        self._appended: list[IndexItem] = []
        self._changed = asyncio.Condition()

    def __len__(self) -> int:
        return len(self._items)

    def add(self, entry: Entry, seq: int) -> IndexItem:
        """Index an entry under its timestamp and root key."""
        item = IndexItem(key=IndexKey.for_entry(entry, seq), value=entry)
        bisect.insort(self._items, item, key=lambda existing: existing.position)
        self._appended.append(item)
        return item

    async def notify(self) -> None:
        """Wake live readers after new rows were added."""
        async with self._changed:
            self._changed.notify_all()

    async def open_read(self, opts: dict[str, Any]) -> AsyncIterator[IndexItem | SyncMarker]:
        reverse = bool(opts.get("reverse", False))
        old = bool(opts.get("old", True))
        live = bool(opts.get("live", not old))
        lt = opts.get("lt")
        gt = opts.get("gt")

        cursor = len(self._appended)
        if old:
            rows = [item for item in self._items if _in_bounds(item.position, lt, gt)]
            if reverse:
                rows.reverse()
            for row in rows:
                yield row

        if not live:
            return
        if old:
            yield SyncMarker()

        while True:
            async with self._changed:
                await self._changed.wait_for(lambda: len(self._appended) > cursor)
                fresh = self._appended[cursor:]
                cursor = len(self._appended)
            for row in fresh:
                if _in_bounds(row.position, lt, gt):
                    yield row


class InMemoryLog:
    """Append-only entry log feeding an InMemoryIndex."""

    def __init__(self, index: InMemoryIndex | None = None) -> None:
        self.index = index or InMemoryIndex()
        self._entries: dict[str, Entry] = {}
        self._order: list[Entry] = []

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    async def append(self, entry: Entry) -> IndexItem:
        """Append an entry and index it.

        Raises:
            ValueError: If an entry with the same key is already stored
        """
        if entry.key in self._entries:
            raise ValueError(f"Entry {entry.key} already in log")
        seq = len(self._order)
        self._entries[entry.key] = entry
        self._order.append(entry)
        item = self.index.add(entry, seq)
        await self.index.notify()
        return item

    async def extend(self, entries: Iterable[Entry]) -> None:
        for entry in entries:
            await self.append(entry)

    async def get(self, key: str) -> Entry | None:
        return self._entries.get(key)

    def entries(self) -> list[Entry]:
        return list(self._order)


class InMemoryGraph:
    """Follow graph keeping the latest state per (source, target) pair."""

    def __init__(self) -> None:
        self._state: dict[str, dict[str, tuple[float, bool]]] = {}

    def follow(
        self,
        source: str,
        target: str,
        following: bool = True,
        timestamp: float | None = None,
    ) -> None:
        ts = time.time() if timestamp is None else timestamp
        edges = self._state.setdefault(source, {})
        current = edges.get(target)
        if current is None or current[0] <= ts:
            edges[target] = (ts, following)

    def unfollow(self, source: str, target: str, timestamp: float | None = None) -> None:
        self.follow(source, target, following=False, timestamp=timestamp)

    async def get_follow_state(self) -> FollowState:
        return {source: dict(edges) for source, edges in self._state.items()}


class InMemorySubscriptions:
    """Channel subscriptions keyed by ``identity:channel``."""

    def __init__(self) -> None:
        self._state: dict[str, tuple[float, bool]] = {}

    def subscribe(
        self,
        identity: str,
        channel: str,
        subscribed: bool = True,
        timestamp: float | None = None,
    ) -> None:
        name = normalize_channel(channel)
        if name is None:
            raise ValueError(f"Invalid channel name: {channel!r}")
        ts = time.time() if timestamp is None else timestamp
        key = f"{identity}:{name}"
        current = self._state.get(key)
        if current is None or current[0] <= ts:
            self._state[key] = (ts, subscribed)

    def unsubscribe(self, identity: str, channel: str, timestamp: float | None = None) -> None:
        self.subscribe(identity, channel, subscribed=False, timestamp=timestamp)

    async def get_subscriptions(self) -> Subscriptions:
        return dict(self._state)


class InMemoryThreadSummarizer:
    """Reply counts and recent reply authors computed from an InMemoryLog."""

    def __init__(self, log: InMemoryLog) -> None:
        self._log = log

    async def summary(self, root_key: str, limit: int) -> dict[str, Any]:
        replies = [
            entry
            for entry in self._log.entries()
            if entry.root_key == root_key and entry.key != root_key and entry.type != VOTE_TYPE
        ]
        authors: list[str] = []
        for reply in reversed(replies):
            if len(authors) >= limit:
                break
            if reply.author not in authors:
                authors.append(reply.author)
        authors.reverse()
        return ThreadSummary(reply_count=len(replies), preview_authors=tuple(authors)).model_dump()
