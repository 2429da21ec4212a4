"""Timeline runtime: resumable index reads, root cache, relevance, paging.

Architecture:
    - resumable.py: ResumableStream (watermark-based restart of index reads)
    - cache.py: LookupCache (bounded LRU of resolved roots)
    - relevance.py: RelevanceFilter (per-viewer relevance predicate)
    - paginator.py: BoundedStream (page truncation)
    - roots.py: RootsEngine (latest/read pipelines)
    - telemetry.py: Structured logging
"""

from __future__ import annotations

from .cache import LookupCache
from .paginator import BoundedStream
from .relevance import RelevanceFilter, forces_display, most_recent_value
from .resumable import ENDED, ResumableStream
from .roots import Bump, ReadState, RootsEngine

__all__ = [
    "BoundedStream",
    "Bump",
    "ENDED",
    "LookupCache",
    "ReadState",
    "RelevanceFilter",
    "ResumableStream",
    "RootsEngine",
    "forces_display",
    "most_recent_value",
]
