"""Shared fixtures: entry factory and an in-memory timeline world."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pytest

from threadline.roots import (
    Entry,
    InMemoryGraph,
    InMemoryLog,
    InMemorySubscriptions,
    InMemoryThreadSummarizer,
    RetryPolicy,
    RootsConfig,
    RootsEngine,
)


def build_entry(
    key: str,
    author: str,
    *,
    timestamp: float = 0,
    type: str = "post",
    channel: str | None = None,
    mentions: list[str] | None = None,
    root: str | None = None,
    private: bool = False,
) -> Entry:
    content: dict[str, Any] = {"type": type}
    if channel is not None:
        content["channel"] = channel
    if mentions is not None:
        content["mentions"] = [{"link": link} for link in mentions]
    if root is not None:
        content["root"] = root
    return Entry(key=key, author=author, content=content, timestamp=timestamp, private=private)


@pytest.fixture
def make_entry() -> Callable[..., Entry]:
    return build_entry


@dataclass
class World:
    """In-memory collaborators wired the way a host process wires them."""

    log: InMemoryLog
    graph: InMemoryGraph
    subscriptions: InMemorySubscriptions
    threads: InMemoryThreadSummarizer

    def engine(self, **overrides: Any) -> RootsEngine:
        kwargs: dict[str, Any] = {
            "index": self.log.index,
            "entries": self.log,
            "graph": self.graph,
            "subscriptions": self.subscriptions,
            "threads": self.threads,
            "self_id": "alice",
            "config": RootsConfig(retry=RetryPolicy(max_attempts=3, base_delay=0)),
        }
        kwargs.update(overrides)
        return RootsEngine(**kwargs)


@pytest.fixture
def world() -> World:
    log = InMemoryLog()
    return World(
        log=log,
        graph=InMemoryGraph(),
        subscriptions=InMemorySubscriptions(),
        threads=InMemoryThreadSummarizer(log),
    )
