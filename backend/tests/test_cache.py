from types import SimpleNamespace

import pytest

from padel_tracker import cache as cache_module
from padel_tracker.cache import TTLCache


@pytest.mark.anyio
async def test_get_returns_value_until_expiry(monkeypatch) -> None:
    clock = [100.0]
    monkeypatch.setattr(cache_module, "time", SimpleNamespace(monotonic=lambda: clock[0]))
    cache = TTLCache(ttl_seconds=10)
    await cache.set(("h2h", "a", "b"), {"total": 1})
    assert await cache.get(("h2h", "a", "b")) == {"total": 1}
    clock[0] = 110.0
    assert await cache.get(("h2h", "a", "b")) is None


@pytest.mark.anyio
async def test_zero_ttl_disables_caching() -> None:
    cache = TTLCache(ttl_seconds=0)
    await cache.set(("partners", "a"), [1])
    assert await cache.get(("partners", "a")) is None


@pytest.mark.anyio
async def test_invalidate_players_evicts_entries_touching_them() -> None:
    cache = TTLCache()
    await cache.set(("h2h", "a", "b"), 1)
    await cache.set(("h2h", "c", "d"), 2)
    await cache.set(("partners", "b"), 3)
    await cache.invalidate_players(["b", None])
    assert await cache.get(("h2h", "a", "b")) is None
    assert await cache.get(("partners", "b")) is None
    assert await cache.get(("h2h", "c", "d")) == 2


@pytest.mark.anyio
async def test_clear() -> None:
    cache = TTLCache()
    await cache.set(("partners", "a"), 1)
    await cache.clear()
    assert await cache.get(("partners", "a")) is None
