"""Tests for the in-memory bearer token cache."""
from r1_server.token_cache import EXPIRY_BUFFER_S, TokenCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_get_returns_stored_token():
    cache = TokenCache(clock=FakeClock())
    cache.put("t", "c", "abc", ttl_seconds=3600)
    cached = cache.get("t", "c")
    assert cached is not None
    assert cached.token == "abc"
    assert cached.token_type == "Bearer"


def test_get_missing_key_returns_none():
    cache = TokenCache(clock=FakeClock())
    cache.put("t", "c", "abc", ttl_seconds=3600)
    assert cache.get("t", "other") is None
    assert cache.get("other", "c") is None


def test_token_expires_inside_buffer_and_is_evicted():
    clock = FakeClock()
    cache = TokenCache(clock=clock)
    cache.put("t", "c", "abc", ttl_seconds=300)

    clock.now += 300 - EXPIRY_BUFFER_S - 1
    assert cache.get("t", "c") is not None

    clock.now += 1
    assert cache.get("t", "c") is None
    assert cache.stats()["count"] == 0


def test_ttl_shorter_than_buffer_is_never_served():
    cache = TokenCache(clock=FakeClock())
    cache.put("t", "c", "abc", ttl_seconds=30)
    assert cache.get("t", "c") is None


def test_put_overwrites_previous_entry():
    cache = TokenCache(clock=FakeClock())
    cache.put("t", "c", "old", ttl_seconds=3600)
    cache.put("t", "c", "new", ttl_seconds=3600)
    assert cache.get("t", "c").token == "new"
    assert cache.stats()["count"] == 1


def test_invalidate_is_idempotent():
    cache = TokenCache(clock=FakeClock())
    cache.put("t", "c", "abc", ttl_seconds=3600)
    cache.invalidate("t", "c")
    cache.invalidate("t", "c")
    assert cache.get("t", "c") is None


def test_clear_and_stats():
    cache = TokenCache(clock=FakeClock())
    cache.put("t1", "c", "a", ttl_seconds=3600)
    cache.put("t2", "c", "b", ttl_seconds=3600)
    stats = cache.stats()
    assert stats["count"] == 2
    assert sorted(stats["keys"]) == ["t1:c", "t2:c"]

    cache.clear()
    assert cache.stats() == {"count": 0, "keys": []}
