"""Bounded LRU cache for resolved thread roots.

Mostly there to avoid reading the same root over and over while walking
many bumps of a busy thread. Not big enough to span several refresh
cycles of a large timeline.
"""

from __future__ import annotations

import asyncio
import threading
from collections import OrderedDict
from collections.abc import Awaitable, Callable

from ..core.config import DEFAULT_CACHE_CAPACITY
from ..models import Entry
from .telemetry import log_root_lookup_failed

Fetch = Callable[[str], Awaitable[Entry | None]]


class LookupCache:
    """Strict least-recently-used map from entry key to entry."""

    def __init__(self, capacity: int = DEFAULT_CACHE_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("LookupCache capacity must be >= 1")
        self._capacity = capacity
        self._entries: OrderedDict[str, Entry] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: str) -> Entry | None:
        """Return the cached entry and mark it most recently used."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
            return entry

    def put(self, key: str, entry: Entry) -> None:
        """Insert or refresh an entry, evicting the least recently used one."""
        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)
            while len(self._entries) > self._capacity:
                self._entries.popitem(last=False)

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    async def resolve(self, key: str, fetch: Fetch) -> Entry | None:
        """Return the entry for ``key``, fetching it on a miss.

        Only local lookups should be passed as ``fetch``: a fetch that waits
        for replication can block the whole read.

        Args:
            key: Entry key
            fetch: Async lookup into the raw entry store

        Returns:
            The entry, or None if the fetch failed or found no body. Such
            results are never cached.
        """
        cached = self.get(key)
        with self._lock:
            if cached is not None:
                self.hits += 1
            else:
                self.misses += 1
        if cached is not None:
            return cached

        try:
            entry = await fetch(key)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log_root_lookup_failed(root_key=key, error=exc)
            return None

        if entry is None:
            log_root_lookup_failed(root_key=key)
            return None
        self.put(key, entry)
        return entry
