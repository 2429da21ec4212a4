"""Per-viewer relevance filter.

A RelevanceFilter is built once per read from snapshots of the follow
graph and the channel subscriptions, then evaluated against every bump
and every resolved root.

Rules:
    - Votes (reactions) are never relevant.
    - is_yours: the author is one of the viewer identities.
    - matches_channel: the entry is not a channel event and declares a
      channel the viewer is subscribed to.
    - matching_tags: ``#channel`` mentions the viewer is subscribed to.
    - mentions_you: a mention links to a viewer identity.
    - following: the viewer follows the author.

    An entry is relevant if any of these holds.

Known limitation:
    Follow and subscription state is only looked up for the first viewer
    identity. Multi-identity viewers see the feed of their primary
    identity plus their own entries and mentions.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence

from ..core.channels import normalize_channel
from ..core.exceptions import DependencyLoadError
from ..core.protocols import FollowState, GraphStore, Subscriptions, SubscriptionStore
from ..models import Entry, Mention, RelevanceRecord
from .telemetry import log_dependency_load_failed

logger = logging.getLogger(__name__)

VOTE_TYPE = "vote"
CHANNEL_TYPE = "channel"
CHANNEL_SIGIL = "#"


def most_recent_value(
    values: Iterable[tuple[float, bool] | None],
) -> tuple[float, bool] | None:
    """Pick the state with the highest timestamp, ignoring missing ones."""
    latest: tuple[float, bool] | None = None
    for value in values:
        if value and (latest is None or latest[0] < value[0]):
            latest = value
    return latest


class RelevanceFilter:
    """Relevance predicate over one snapshot of graph and subscriptions."""

    def __init__(
        self,
        follow_state: FollowState | None = None,
        subscriptions: Subscriptions | None = None,
    ) -> None:
        self._follow_state = follow_state or {}
        self._subscriptions = subscriptions or {}

    @classmethod
    async def load(cls, graph: GraphStore, subscriptions: SubscriptionStore) -> RelevanceFilter:
        """Load both snapshots, graph first.

        Raises:
            DependencyLoadError: If either snapshot cannot be loaded
        """
        try:
            follow_state = await graph.get_follow_state()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log_dependency_load_failed(stage="graph", error=exc)
            raise DependencyLoadError(f"Failed to load follow graph: {exc}", stage="graph") from exc

        try:
            subscription_state = await subscriptions.get_subscriptions()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log_dependency_load_failed(stage="subscriptions", error=exc)
            raise DependencyLoadError(
                f"Failed to load subscriptions: {exc}", stage="subscriptions"
            ) from exc

        logger.debug(
            "Loaded relevance snapshots",
            extra={
                "follow_sources": len(follow_state),
                "subscriptions": len(subscription_state),
            },
        )
        return cls(follow_state, subscription_state)

    def evaluate(self, ids: Sequence[str], entry: Entry) -> RelevanceRecord | None:
        """Decide whether the viewer identities should see ``entry``.

        Returns:
            RelevanceRecord with the reasons, or None if not relevant
        """
        content = entry.content
        if content.type == VOTE_TYPE:
            return None

        has_channel = bool(content.channel)
        matches_channel = content.type != CHANNEL_TYPE and self.is_subscribed(ids, content.channel)
        matching_tags = self.matching_tags(ids, content.mentions)
        is_yours = entry.author in ids
        mentions_you = self.mentions_you(ids, content.mentions)
        following = self.is_following(ids, entry.author)

        if is_yours or matches_channel or matching_tags or following or mentions_you:
            return RelevanceRecord(
                matching_tags=matching_tags,
                matches_channel=matches_channel,
                is_yours=is_yours,
                following=following,
                mentions_you=mentions_you,
                has_channel=has_channel,
            )
        return None

    def is_subscribed(self, ids: Sequence[str], channel: str | None) -> bool:
        channel = normalize_channel(channel)
        if not channel:
            return False
        value = most_recent_value(
            self._subscriptions.get(f"{viewer}:{channel}") for viewer in ids[:1]
        )
        return bool(value and value[1])

    def is_following(self, ids: Sequence[str], author: str) -> bool:
        if not ids:
            return False
        value = self._follow_state.get(ids[0], {}).get(author)
        return bool(value and value[1])

    def matching_tags(
        self, ids: Sequence[str], mentions: Sequence[Mention] | None
    ) -> tuple[str, ...]:
        """Normalised ``#channel`` mentions the viewer is subscribed to."""
        tags: list[str] = []
        for mention in mentions or ():
            link = mention.link
            if not isinstance(link, str) or not link.startswith(CHANNEL_SIGIL):
                continue
            channel = normalize_channel(link[len(CHANNEL_SIGIL) :])
            if channel and channel not in tags and self.is_subscribed(ids, channel):
                tags.append(channel)
        return tuple(tags)

    @staticmethod
    def mentions_you(ids: Sequence[str], mentions: Sequence[Mention] | None) -> bool:
        return any(
            isinstance(mention.link, str) and mention.link in ids for mention in mentions or ()
        )


def forces_display(record: RelevanceRecord | None) -> bool:
    """Whether a reply with this record pulls its root into the feed."""
    return record is not None and record.forces_display
