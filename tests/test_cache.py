"""Tests for the TTL cache"""

from __future__ import annotations

from core.cache import TTLCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_entry_carries_expiry():
    clock = FakeClock()
    cache: TTLCache[str] = TTLCache(60, clock=clock)
    cache.set("a", "value")
    assert cache.entry("a") == ("value", 1060.0)


def test_expires_after_ttl():
    clock = FakeClock()
    cache: TTLCache[str] = TTLCache(60, clock=clock)
    cache.set("a", "value")

    clock.now = 1059.9
    assert cache.get("a") == "value"

    clock.now = 1060.0
    assert cache.get("a") is None
    assert cache.entry("a") is None


def test_invalidate_one_and_all():
    cache: TTLCache[int] = TTLCache(60, clock=FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)

    cache.invalidate("a")
    assert cache.get("a") is None
    assert cache.get("b") == 2

    cache.invalidate()
    assert cache.get("b") is None


def test_instances_are_independent():
    first: TTLCache[int] = TTLCache(60)
    second: TTLCache[int] = TTLCache(60)
    first.set("a", 1)
    assert second.get("a") is None


def test_invalidate_bumps_generation():
    cache: TTLCache[int] = TTLCache(60, clock=FakeClock())
    before = cache.generation
    cache.invalidate("missing")
    assert cache.generation == before + 1


def test_value_computed_before_invalidation_is_dropped():
    cache: TTLCache[int] = TTLCache(60, clock=FakeClock())
    generation = cache.generation
    cache.invalidate("a")

    cache.set("a", 1, generation=generation)
    assert cache.get("a") is None

    cache.set("a", 2, generation=cache.generation)
    assert cache.get("a") == 2
