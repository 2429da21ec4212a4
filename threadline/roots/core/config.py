"""Configuration and retry policy definitions.

Defaults match the reference deployment: a 100 entry root cache and
three preview authors per thread summary. Every value can be overridden
through the constructor or, for long-running hosts, through
``THREADLINE_*`` environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

DEFAULT_CACHE_CAPACITY = 100
DEFAULT_SUMMARY_LIMIT = 3

ENV_PREFIX = "THREADLINE_"


@dataclass(frozen=True)
class RetryPolicy:
    """Retry policy for resumable index reads.

    Attributes:
        max_attempts: Consecutive failed attempts after which the read
            gives up (None = retry forever)
        base_delay: Delay before the first retry (seconds)
        max_delay: Upper bound for the backoff delay (seconds)
        multiplier: Backoff growth factor between consecutive failures
    """

    max_attempts: int | None = 5
    base_delay: float = 0.1
    max_delay: float = 5.0
    multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("RetryPolicy max_attempts must be >= 1 or None")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("RetryPolicy delays cannot be negative")
        if self.multiplier < 1:
            raise ValueError("RetryPolicy multiplier must be >= 1")

    @property
    def unbounded(self) -> bool:
        return self.max_attempts is None

    def allows(self, failures: int) -> bool:
        """Whether another attempt is allowed after ``failures`` consecutive failures."""
        return self.max_attempts is None or failures < self.max_attempts

    def delay(self, failures: int) -> float:
        """Backoff delay after ``failures`` consecutive failures (1-based)."""
        if failures <= 0:
            return 0.0
        return min(self.base_delay * self.multiplier ** (failures - 1), self.max_delay)


@dataclass(frozen=True)
class RootsConfig:
    """Engine configuration.

    Attributes:
        cache_capacity: Number of resolved roots kept in the lookup cache
        summary_limit: Preview size requested from the thread summarizer
        retry: Retry policy for the historical index read
    """

    cache_capacity: int = DEFAULT_CACHE_CAPACITY
    summary_limit: int = DEFAULT_SUMMARY_LIMIT
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    def __post_init__(self) -> None:
        if self.cache_capacity < 1:
            raise ValueError("cache_capacity must be >= 1")
        if self.summary_limit < 0:
            raise ValueError("summary_limit cannot be negative")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RootsConfig:
        """Build a config from ``THREADLINE_*`` environment variables.

        Unset variables keep their defaults. ``THREADLINE_RETRY_MAX_ATTEMPTS``
        accepts ``none`` or ``0`` for unbounded retries.
        """
        env = os.environ if environ is None else environ
        defaults = RetryPolicy()

        def _get(name: str) -> str | None:
            value = env.get(f"{ENV_PREFIX}{name}")
            return value.strip() if value is not None and value.strip() else None

        max_attempts: int | None = defaults.max_attempts
        raw_attempts = _get("RETRY_MAX_ATTEMPTS")
        if raw_attempts is not None:
            max_attempts = None if raw_attempts.lower() in ("none", "0") else int(raw_attempts)

        raw_base = _get("RETRY_BASE_DELAY")
        raw_max = _get("RETRY_MAX_DELAY")
        retry = RetryPolicy(
            max_attempts=max_attempts,
            base_delay=float(raw_base) if raw_base is not None else defaults.base_delay,
            max_delay=float(raw_max) if raw_max is not None else defaults.max_delay,
            multiplier=defaults.multiplier,
        )

        raw_capacity = _get("CACHE_CAPACITY")
        raw_summary = _get("SUMMARY_LIMIT")
        return cls(
            cache_capacity=int(raw_capacity) if raw_capacity is not None else DEFAULT_CACHE_CAPACITY,
            summary_limit=int(raw_summary) if raw_summary is not None else DEFAULT_SUMMARY_LIMIT,
            retry=retry,
        )
