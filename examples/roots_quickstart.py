#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging

from threadline.roots import (
    InMemoryGraph,
    InMemoryLog,
    InMemorySubscriptions,
    InMemoryThreadSummarizer,
    Marker,
    RootsConfig,
    RootsEngine,
)
from threadline.roots.models import Entry


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Quickstart for paging through a roots timeline")
    p.add_argument("viewer", nargs="?", default="alice")
    p.add_argument("--limit", type=int, default=2, help="Roots per page")
    p.add_argument("--reverse", action="store_true", help="Newest first")
    p.add_argument("--debug", action="store_true", help="Show engine log events")
    return p.parse_args()


def entry(key, author, ts, **content) -> Entry:
    return Entry(key=key, author=author, timestamp=ts, content={"type": "post", **content})


async def seed(log: InMemoryLog, graph: InMemoryGraph, subs: InMemorySubscriptions) -> None:
    graph.follow("alice", "bob", timestamp=0)
    subs.subscribe("alice", "books", timestamp=0)
    await log.extend(
        [
            entry("%welcome", "bob", 1),
            entry("%dune", "carol", 2, channel="books"),
            entry("%films", "dave", 3, channel="movies"),
            entry("%r1", "erin", 4, root="%films", mentions=[{"link": "alice"}]),
            entry("%r2", "alice", 5, root="%films"),
            entry("%r3", "frank", 6, root="%dune"),
            entry("%tagged", "gus", 7, mentions=[{"link": "#books"}]),
            entry("%r4", "bob", 8, root="%welcome"),
        ]
    )


async def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    log = InMemoryLog()
    graph = InMemoryGraph()
    subs = InMemorySubscriptions()
    await seed(log, graph, subs)

    engine = RootsEngine(
        index=log.index,
        entries=log,
        graph=graph,
        subscriptions=subs,
        threads=InMemoryThreadSummarizer(log),
        self_id=args.viewer,
        config=RootsConfig.from_env(),
    )

    bound = None
    page_no = 1
    while True:
        bounds = {"lt": bound} if args.reverse else {"gt": bound}
        marker = None
        print(f"--- page {page_no}")
        async for item in engine.read(reverse=args.reverse, limit=args.limit, **bounds):
            if isinstance(item, Marker):
                marker = item
                continue
            reasons = item.filter_result
            print(
                f"{item.timestamp:>4.0f} | {item.key:<10} | {item.author:<6} | replies={item.reply_count} "
                f"authors={list(item.preview_authors or ())} | forced={reasons.forced} "
                f"yours={reasons.is_yours} following={reasons.following} channel={reasons.matches_channel}"
            )
        if marker is None:
            break
        bound = marker
        page_no += 1

    print(f"cache: {len(engine.cache)} roots, hits={engine.cache.hits} misses={engine.cache.misses}")


if __name__ == "__main__":
    asyncio.run(main())
