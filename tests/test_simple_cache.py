"""Unit tests for the in-memory SimpleTTLCache."""

import threading

import pytest

from nippondaily.schemas.news import NewsItem
from nippondaily.utils import simple_cache
from nippondaily.utils.simple_cache import SimpleTTLCache


class FakeTime:
    """Deterministic clock used to test expiration logic."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def time(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


def _sample_item(**overrides) -> NewsItem:
    base = {
        "title": "Nikkei hits record high",
        "summary": "Stocks rallied.",
        "published_at": "2025-02-28T06:00:00Z",
        "category": "Business",
        "credibility_score": 0.8,
    }
    base.update(overrides)
    return NewsItem(**base)


def test_set_and_get_updates_hit_miss_counters() -> None:
    cache: SimpleTTLCache[NewsItem] = SimpleTTLCache(ttl_seconds=10)

    assert cache.get("missing") is None

    item = _sample_item()
    cache.set("key", item)

    assert cache.get("key") == item
    assert len(cache) == 1

    stats = cache.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1


def test_expired_entry_is_evicted(monkeypatch: pytest.MonkeyPatch) -> None:
    fake_time = FakeTime()
    monkeypatch.setattr(simple_cache, "time", fake_time)

    cache = SimpleTTLCache(ttl_seconds=5)
    cache.set("key", _sample_item())

    fake_time.advance(4)
    assert cache.get("key") is not None

    fake_time.advance(2)
    assert cache.get("key") is None
    assert cache.stats()["evictions"] == 1


def test_set_sweeps_expired_entries(monkeypatch: pytest.MonkeyPatch) -> None:
    fake_time = FakeTime()
    monkeypatch.setattr(simple_cache, "time", fake_time)

    cache = SimpleTTLCache(ttl_seconds=5)
    cache.set("old", "a")
    fake_time.advance(10)
    cache.set("new", "b")

    assert len(cache) == 1


def test_lru_eviction_removes_least_recently_used() -> None:
    cache = SimpleTTLCache(ttl_seconds=100, max_entries=2)
    cache.set("a", {"v": 1})
    cache.set("b", {"v": 2})

    # Access "a" so that "b" becomes least recently used
    assert cache.get("a") == {"v": 1}

    cache.set("c", {"v": 3})

    assert cache.get("a") == {"v": 1}
    assert cache.get("c") == {"v": 3}
    assert cache.get("b") is None


def test_clear_resets_state() -> None:
    cache = SimpleTTLCache(ttl_seconds=10)
    cache.set("a", {"v": 1})
    cache.set("b", {"v": 2})
    cache.get("a")

    cache.clear()

    stats = cache.stats()
    assert stats["entries"] == 0
    assert stats["hits"] == 0
    assert stats["misses"] == 0
    assert stats["evictions"] == 0


def test_thread_safety_under_concurrent_sets() -> None:
    cache = SimpleTTLCache(ttl_seconds=30, max_entries=None)
    total_keys = 50

    def _writer(idx: int) -> None:
        cache.set(f"k-{idx}", {"v": idx})

    threads = [threading.Thread(target=_writer, args=(i,)) for i in range(total_keys)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert cache.stats()["entries"] == total_keys
    assert cache.get("k-0") == {"v": 0}
    assert cache.get("k-49") == {"v": 49}
