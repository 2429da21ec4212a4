"""Protocols for the collaborators the roots engine reads from.

Architecture:
    The engine never owns storage. It consumes an append-only secondary
    index, a random-access entry store, the follow graph, the channel
    subscription store and a thread summarizer through these protocols.
    Any class implementing the methods works; ``threadline.roots.stores``
    ships in-memory implementations.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from typing import Any, Protocol

from ..models import Entry, IndexItem, SyncMarker

# identity -> identity -> (timestamp, following)
FollowState = Mapping[str, Mapping[str, tuple[float, bool]]]
# "identity:channel" -> (timestamp, subscribed)
Subscriptions = Mapping[str, tuple[float, bool]]


class IndexStore(Protocol):
    """Timestamp-ordered secondary index of root bumps."""

    def open_read(self, opts: dict[str, Any]) -> AsyncIterator[IndexItem | SyncMarker]:
        """Open a read over the index.

        Args:
            opts: Read options. ``reverse`` (bool), ``old`` (include
                existing rows), ``live`` (keep streaming new rows), and the
                strict bounds ``lt``/``gt``. A number bounds the timestamp
                only; a ``(timestamp, seq)`` tuple bounds the exact position.
        """
        ...


class EntryStore(Protocol):
    """Random access to raw log entries. Not replication-order aware."""

    async def get(self, key: str) -> Entry | None:
        """Return the entry for ``key``, or None when it has no local body."""
        ...


class GraphStore(Protocol):
    async def get_follow_state(self) -> FollowState:
        ...


class SubscriptionStore(Protocol):
    async def get_subscriptions(self) -> Subscriptions:
        ...


class ThreadSummarizer(Protocol):
    async def summary(self, root_key: str, limit: int) -> Mapping[str, Any]:
        """Summarise reply activity for a thread.

        Raises:
            Exception: Any failure aborts the read that requested it
        """
        ...
