"""Relevance record attached to timeline roots."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class RelevanceRecord(BaseModel):
    """Reasons a viewer gets to see an entry.

    ``forced`` marks a root shown only because one of its replies is
    directly relevant (authored by the viewer or tagged with a subscribed
    channel).
    """

    matching_tags: tuple[str, ...] = ()
    matches_channel: bool = False
    is_yours: bool = False
    following: bool = False
    mentions_you: bool = False
    has_channel: bool = False
    forced: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def forces_display(self) -> bool:
        """Whether a reply with this record pulls its root into the feed."""
        return bool(self.matching_tags) or self.is_yours

    def as_forced(self) -> RelevanceRecord:
        return self.model_copy(update={"forced": True})
