from __future__ import annotations

from scheduling_gateway.data import TTLCache


class Ticker:
    def __init__(self) -> None:
        self.value = 0.0

    def __call__(self) -> float:
        return self.value


def test_get_returns_value_until_expiry_then_evicts():
    ticker = Ticker()
    cache = TTLCache(default_ttl_seconds=10, clock=ticker)
    cache.set("a", {"x": 1})
    ticker.value = 10.0
    assert cache.get("a") == {"x": 1}
    ticker.value = 10.5
    assert cache.get("a") is None
    assert len(cache) == 0


def test_explicit_ttl_overrides_default():
    ticker = Ticker()
    cache = TTLCache(default_ttl_seconds=100, clock=ticker)
    cache.set("short", "v", ttl_seconds=1)
    ticker.value = 2.0
    assert "short" not in cache


def test_delete_and_clear_remove_entries_immediately():
    cache = TTLCache(default_ttl_seconds=60)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.delete("a")
    cache.delete("never-set")
    assert cache.get("a", "absent") == "absent"
    cache.clear()
    assert len(cache) == 0


def test_falsy_values_are_still_hits():
    cache = TTLCache(default_ttl_seconds=60)
    cache.set("empty", [])
    assert "empty" in cache
    assert cache.get("empty", "absent") == []
