"""Reference collaborator implementations."""

from .in_memory import (
    InMemoryGraph,
    InMemoryIndex,
    InMemoryLog,
    InMemorySubscriptions,
    InMemoryThreadSummarizer,
)

__all__ = [
    "InMemoryGraph",
    "InMemoryIndex",
    "InMemoryLog",
    "InMemorySubscriptions",
    "InMemoryThreadSummarizer",
]
