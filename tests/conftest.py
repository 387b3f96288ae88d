"""Shared test fixtures: controllable clock, fresh cache, GitHub transport fakes."""

import os

import pytest

# Set env before any portfolio imports so settings are deterministic
os.environ.setdefault("GITHUB_TOKEN", "")
os.environ.setdefault("FEATURED_REPOS", "")
os.environ.setdefault("CACHE_CLEANUP_INTERVAL_SECONDS", "0")

from portfolio.core.cache import MemoryCache  # noqa: E402


class FakeClock:
    """Manually advanced clock, seconds since epoch."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    """Fresh 30-minute cache driven by the fake clock."""
    return MemoryCache(default_ttl_minutes=30, clock=clock)
