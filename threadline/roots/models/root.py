"""Annotated timeline root."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from .entry import Entry
from .relevance import RelevanceRecord


class ThreadSummary(BaseModel):
    """Reply activity of a thread as reported by the summarizer."""

    reply_count: int = 0
    preview_authors: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True, extra="allow")


class Root(Entry):
    """Thread root as returned to timeline callers.

    Carries the original entry fields, the relevance record that got it
    into the feed, and the thread summary fields merged at top level.
    Summary fields stay None for live roots, which are not summarised.
    """

    filter_result: RelevanceRecord
    reply_count: int | None = None
    preview_authors: tuple[str, ...] | None = None

    model_config = ConfigDict(frozen=True, extra="allow")

    @classmethod
    def from_entry(
        cls,
        entry: Entry,
        filter_result: RelevanceRecord,
        summary: ThreadSummary | Mapping[str, Any] | None = None,
    ) -> Root:
        fields: dict[str, Any] = {
            "key": entry.key,
            "author": entry.author,
            "content": entry.content,
            "timestamp": entry.timestamp,
            "private": entry.private,
        }
        if summary is not None:
            if isinstance(summary, BaseModel):
                summary = summary.model_dump()
            # Entry fields and the relevance record always win over summary keys
            extra = {k: v for k, v in summary.items() if k != "filter_result"}
            fields = {**extra, **fields}
        return cls(**fields, filter_result=filter_result)

    def with_summary(self, summary: ThreadSummary | Mapping[str, Any]) -> Root:
        return Root.from_entry(self, self.filter_result, summary)
