"""Data models for timeline records.

Architecture:
    This module exports all Pydantic v2 models used throughout the library.
    All models are immutable (frozen=True); pipeline stages annotate by
    building new records instead of mutating entries shared with the cache.

Model Categories:
    - Log: Entry, Content, Mention
    - Index: IndexKey, IndexItem, SyncMarker
    - Timeline: RelevanceRecord, Root, ThreadSummary, Marker
"""

from .entry import Content, Entry, Mention
from .index import IndexItem, IndexKey, SyncMarker
from .marker import Marker, marker_timestamp
from .relevance import RelevanceRecord
from .root import Root, ThreadSummary

__all__ = [
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
    "marker_timestamp",
]
