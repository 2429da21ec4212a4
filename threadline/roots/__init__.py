"""Threadline Roots - relevance-filtered, resumable timeline of thread roots."""

from .core import (
    DependencyLoadError,
    RetryExhaustedError,
    RetryPolicy,
    RootsConfig,
    RootsError,
    ThreadSummaryError,
    normalize_channel,
)
from .models import (
    Content,
    Entry,
    IndexItem,
    IndexKey,
    Marker,
    Mention,
    RelevanceRecord,
    Root,
    SyncMarker,
    ThreadSummary,
)
from .runtime import (
    BoundedStream,
    LookupCache,
    RelevanceFilter,
    ResumableStream,
    RootsEngine,
)
from .stores import (
    InMemoryGraph,
    InMemoryIndex,
    InMemoryLog,
    InMemorySubscriptions,
    InMemoryThreadSummarizer,
)

__version__ = "0.1.0"

__all__ = [
    # Engine
    "RootsEngine",
    "RootsConfig",
    "RetryPolicy",
    "ResumableStream",
    "LookupCache",
    "RelevanceFilter",
    "BoundedStream",
    # Models
    "Content",
    "Entry",
    "IndexItem",
    "IndexKey",
    "Marker",
    "Mention",
    "RelevanceRecord",
    "Root",
    "SyncMarker",
    "ThreadSummary",
    # Exceptions
    "RootsError",
    "DependencyLoadError",
    "RetryExhaustedError",
    "ThreadSummaryError",
    # Stores
    "InMemoryGraph",
    "InMemoryIndex",
    "InMemoryLog",
    "InMemorySubscriptions",
    "InMemoryThreadSummarizer",
    "normalize_channel",
]
