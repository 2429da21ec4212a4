"""Unit tests for RelevanceFilter."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from threadline.roots.core import DependencyLoadError
from threadline.roots.models import Entry, RelevanceRecord
from threadline.roots.runtime import RelevanceFilter, forces_display, most_recent_value

VIEWER = ["alice"]


@pytest.fixture
def relevance() -> RelevanceFilter:
    return RelevanceFilter(
        follow_state={"alice": {"bob": (10, True), "mallory": (12, False)}},
        subscriptions={
            "alice:books": (5, True),
            "alice:movies": (7, False),
        },
    )


def test_votes_are_never_relevant(relevance, make_entry):
    vote = make_entry("%v", "alice", type="vote", channel="books", mentions=["alice", "#books"])

    assert relevance.evaluate(VIEWER, vote) is None


def test_own_entries_are_relevant(relevance, make_entry):
    record = relevance.evaluate(VIEWER, make_entry("%a", "alice"))

    assert record == RelevanceRecord(is_yours=True)


def test_subscribed_channel_matches(relevance, make_entry):
    record = relevance.evaluate(VIEWER, make_entry("%a", "carol", channel="Books"))

    assert record is not None
    assert record.matches_channel
    assert record.has_channel
    assert not record.is_yours


def test_unsubscribed_channel_does_not_match(relevance, make_entry):
    assert relevance.evaluate(VIEWER, make_entry("%a", "carol", channel="movies")) is None


def test_channel_events_do_not_match_channel(relevance, make_entry):
    entry = make_entry("%a", "carol", type="channel", channel="books")

    assert relevance.evaluate(VIEWER, entry) is None


def test_matching_tags_are_normalised_and_unique(relevance, make_entry):
    entry = make_entry("%a", "carol", mentions=["#Books", "#movies", "#books", "bob"])

    record = relevance.evaluate(VIEWER, entry)

    assert record is not None
    assert record.matching_tags == ("books",)
    assert not record.has_channel


def test_mentions_you(relevance, make_entry):
    record = relevance.evaluate(VIEWER, make_entry("%a", "carol", mentions=["alice"]))

    assert record is not None
    assert record.mentions_you
    assert record.matching_tags == ()


def test_malformed_mentions_are_skipped(relevance):
    entry = Entry(
        key="%a",
        author="carol",
        content={
            "type": "post",
            "mentions": [{"link": None}, "junk", {"link": 42}, {"link": "#books"}, {"link": "alice"}],
        },
        timestamp=1,
    )

    record = relevance.evaluate(VIEWER, entry)

    assert record is not None
    assert record.matching_tags == ("books",)
    assert record.mentions_you


def test_only_malformed_mentions_are_not_relevant(relevance):
    entry = Entry(
        key="%a",
        author="carol",
        content={"type": "post", "mentions": [{"link": None}, "alice", ["#books"]]},
        timestamp=1,
    )

    assert relevance.evaluate(VIEWER, entry) is None


def test_following_uses_latest_state(relevance, make_entry):
    assert relevance.evaluate(VIEWER, make_entry("%a", "bob")).following
    assert relevance.evaluate(VIEWER, make_entry("%b", "mallory")) is None


def test_unrelated_entry_is_not_relevant(relevance, make_entry):
    assert relevance.evaluate(VIEWER, make_entry("%a", "carol")) is None


def test_graph_and_channels_use_first_identity_only(make_entry):
    relevance = RelevanceFilter(
        follow_state={"work": {"bob": (1, True)}},
        subscriptions={"work:books": (1, True)},
    )
    ids = ["alice", "work"]

    assert relevance.evaluate(ids, make_entry("%a", "bob")) is None
    assert relevance.evaluate(ids, make_entry("%b", "carol", channel="books")) is None
    # Authorship and mentions still cover every identity
    assert relevance.evaluate(ids, make_entry("%c", "work")).is_yours
    assert relevance.evaluate(ids, make_entry("%d", "carol", mentions=["work"])).mentions_you


def test_empty_snapshots_only_match_authorship(make_entry):
    relevance = RelevanceFilter()

    assert relevance.evaluate(VIEWER, make_entry("%a", "bob", channel="books")) is None
    assert relevance.evaluate(VIEWER, make_entry("%b", "alice")).is_yours


def test_most_recent_value_picks_highest_timestamp():
    assert most_recent_value([None, (3, False), (5, True), (4, False)]) == (5, True)
    assert most_recent_value([None, None]) is None


def test_forces_display():
    assert forces_display(RelevanceRecord(is_yours=True))
    assert forces_display(RelevanceRecord(matching_tags=("books",)))
    assert not forces_display(RelevanceRecord(mentions_you=True))
    assert not forces_display(None)


class TestLoad:
    @pytest.mark.asyncio
    async def test_loads_graph_then_subscriptions(self, make_entry):
        graph = MagicMock()
        graph.get_follow_state = AsyncMock(return_value={"alice": {"bob": (1, True)}})
        subscriptions = MagicMock()
        subscriptions.get_subscriptions = AsyncMock(return_value={"alice:books": (1, True)})

        relevance = await RelevanceFilter.load(graph, subscriptions)

        assert relevance.evaluate(VIEWER, make_entry("%a", "bob")).following
        assert relevance.evaluate(VIEWER, make_entry("%b", "carol", channel="books")).matches_channel

    @pytest.mark.asyncio
    async def test_graph_failure_skips_subscriptions(self):
        graph = MagicMock()
        graph.get_follow_state = AsyncMock(side_effect=OSError("graph offline"))
        subscriptions = MagicMock()
        subscriptions.get_subscriptions = AsyncMock(return_value={})

        with pytest.raises(DependencyLoadError) as exc_info:
            await RelevanceFilter.load(graph, subscriptions)

        assert exc_info.value.stage == "graph"
        assert isinstance(exc_info.value.__cause__, OSError)
        subscriptions.get_subscriptions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_subscription_failure(self):
        graph = MagicMock()
        graph.get_follow_state = AsyncMock(return_value={})
        subscriptions = MagicMock()
        subscriptions.get_subscriptions = AsyncMock(side_effect=RuntimeError("no index"))

        with pytest.raises(DependencyLoadError, match="subscriptions") as exc_info:
            await RelevanceFilter.load(graph, subscriptions)

        assert exc_info.value.stage == "subscriptions"
