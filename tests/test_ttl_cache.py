"""Tests for the TTL cache."""

import pytest

from kiosk_dashboard.adapters.cache import CacheKeys, TtlCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TtlCache:
    return TtlCache(clock=clock)


def test_get_returns_value_before_ttl(cache: TtlCache, clock: FakeClock) -> None:
    """Given a stored value, when read before its TTL elapses, then it is returned."""
    cache.set(CacheKeys.TRANSIT, ["a"], ttl_seconds=15)
    clock.advance(14.9)

    assert cache.get(CacheKeys.TRANSIT) == ["a"]
    assert cache.has(CacheKeys.TRANSIT) is True


def test_get_at_exact_ttl_is_absent(cache: TtlCache, clock: FakeClock) -> None:
    """Given a stored value, when read exactly at its TTL, then it is absent and evicted."""
    cache.set(CacheKeys.WEATHER, {"temp": 70}, ttl_seconds=300)
    clock.advance(300)

    assert cache.get(CacheKeys.WEATHER) is None
    assert len(cache) == 0


def test_missing_key_is_absent(cache: TtlCache) -> None:
    """Given an empty cache, when reading a key, then None is returned."""
    assert cache.get("nope") is None
    assert cache.has("nope") is False


def test_set_replaces_entry_and_restarts_ttl(cache: TtlCache, clock: FakeClock) -> None:
    """Given an entry close to expiry, when overwritten, then the new value gets a fresh TTL."""
    cache.set(CacheKeys.BIKESHARE, "old", ttl_seconds=30)
    clock.advance(25)
    cache.set(CacheKeys.BIKESHARE, "new", ttl_seconds=30)
    clock.advance(25)

    assert cache.get(CacheKeys.BIKESHARE) == "new"


def test_set_none_is_rejected(cache: TtlCache) -> None:
    """Given None as a value, when storing it, then ValueError is raised."""
    with pytest.raises(ValueError, match="None cannot be cached"):
        cache.set(CacheKeys.WEATHER, None, ttl_seconds=10)


def test_empty_list_is_a_cacheable_value(cache: TtlCache) -> None:
    """Given an empty list, when stored, then it is served as a present value."""
    cache.set(CacheKeys.TRANSIT_ALERTS, [], ttl_seconds=600)

    assert cache.get(CacheKeys.TRANSIT_ALERTS) == []


def test_clear_removes_everything(cache: TtlCache) -> None:
    """Given several entries, when cleared, then all are gone."""
    cache.set(CacheKeys.TRANSIT, [1], ttl_seconds=10)
    cache.set(CacheKeys.DASHBOARD, [2], ttl_seconds=10)

    cache.clear()

    assert len(cache) == 0
    assert cache.get(CacheKeys.DASHBOARD) is None
