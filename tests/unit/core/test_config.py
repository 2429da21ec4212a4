"""Unit tests for RootsConfig and RetryPolicy."""

from __future__ import annotations

import pytest

from threadline.roots.core import RetryPolicy, RootsConfig


class TestRetryPolicy:
    def test_delay_grows_and_caps(self):
        policy = RetryPolicy(base_delay=0.5, max_delay=2.0, multiplier=2.0)

        assert policy.delay(0) == 0.0
        assert policy.delay(1) == 0.5
        assert policy.delay(2) == 1.0
        assert policy.delay(3) == 2.0
        assert policy.delay(10) == 2.0

    def test_allows_until_max_attempts(self):
        policy = RetryPolicy(max_attempts=3)

        assert policy.allows(1)
        assert policy.allows(2)
        assert not policy.allows(3)

    def test_unbounded_always_allows(self):
        policy = RetryPolicy(max_attempts=None)

        assert policy.unbounded
        assert policy.allows(10_000)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_attempts": 0},
            {"base_delay": -1},
            {"max_delay": -1},
            {"multiplier": 0.5},
        ],
    )
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)


class TestRootsConfig:
    def test_defaults(self):
        config = RootsConfig()

        assert config.cache_capacity == 100
        assert config.summary_limit == 3
        assert config.retry == RetryPolicy()

    def test_rejects_empty_cache(self):
        with pytest.raises(ValueError, match="cache_capacity"):
            RootsConfig(cache_capacity=0)

    def test_from_env_reads_overrides(self):
        config = RootsConfig.from_env(
            {
                "THREADLINE_CACHE_CAPACITY": "250",
                "THREADLINE_SUMMARY_LIMIT": "5",
                "THREADLINE_RETRY_MAX_ATTEMPTS": "7",
                "THREADLINE_RETRY_BASE_DELAY": "0.25",
                "THREADLINE_RETRY_MAX_DELAY": "10",
            }
        )

        assert config.cache_capacity == 250
        assert config.summary_limit == 5
        assert config.retry.max_attempts == 7
        assert config.retry.base_delay == 0.25
        assert config.retry.max_delay == 10.0

    @pytest.mark.parametrize("raw", ["none", "NONE", "0"])
    def test_from_env_unbounded_retry(self, raw):
        config = RootsConfig.from_env({"THREADLINE_RETRY_MAX_ATTEMPTS": raw})

        assert config.retry.unbounded

    def test_from_env_ignores_blank_values(self):
        config = RootsConfig.from_env({"THREADLINE_CACHE_CAPACITY": "  "})

        assert config == RootsConfig()
