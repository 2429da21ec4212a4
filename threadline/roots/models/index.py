"""Secondary index records."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .entry import Entry


class IndexKey(BaseModel):
    """Position of a bump in the roots index.

    The index is ordered by ``timestamp``; ``seq`` is the log insertion
    sequence and breaks ties so every position is unique.
    """

    timestamp: float
    root_key: str = Field(..., min_length=1)
    seq: int = 0

    model_config = ConfigDict(frozen=True)

    @property
    def position(self) -> tuple[float, int]:
        return (self.timestamp, self.seq)

    @classmethod
    def for_entry(cls, entry: Entry, seq: int = 0) -> IndexKey:
        """Index key for an entry: its timestamp and the root it bumps."""
        return cls(timestamp=entry.timestamp, root_key=entry.root_key, seq=seq)


class IndexItem(BaseModel):
    """Single index row: the bump position and the entry that caused it."""

    key: IndexKey
    value: Entry

    model_config = ConfigDict(frozen=True)

    @property
    def timestamp(self) -> float:
        return self.key.timestamp

    @property
    def position(self) -> tuple[float, int]:
        return self.key.position


class SyncMarker(BaseModel):
    """Boundary between historical and live items of a live read."""

    sync: Literal[True] = True

    model_config = ConfigDict(frozen=True)
