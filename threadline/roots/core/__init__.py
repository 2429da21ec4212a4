"""Core components."""

from .channels import normalize_channel
from .config import RetryPolicy, RootsConfig
from .exceptions import (
    DependencyLoadError,
    RetryExhaustedError,
    RootsError,
    ThreadSummaryError,
)
from .protocols import (
    EntryStore,
    FollowState,
    GraphStore,
    IndexStore,
    SubscriptionStore,
    Subscriptions,
    ThreadSummarizer,
)

__all__ = [
    "normalize_channel",
    "RetryPolicy",
    "RootsConfig",
    # Exceptions
    "RootsError",
    "DependencyLoadError",
    "RetryExhaustedError",
    "ThreadSummaryError",
    # Collaborator protocols
    "EntryStore",
    "FollowState",
    "GraphStore",
    "IndexStore",
    "SubscriptionStore",
    "Subscriptions",
    "ThreadSummarizer",
]
