from __future__ import annotations

from asyncio import Lock
from collections.abc import Iterable
import time
from typing import Any

from .config import STATS_CACHE_TTL_SECONDS


class TTLCache:
    """In-memory TTL cache for statistics responses.

    Keys are tuples whose first item names the statistic and whose remaining
    items are the player ids involved, e.g. ``("h2h", a, b)``. That lets a new
    match evict every entry touching one of its players.
    """

    def __init__(self, ttl_seconds: float = 120.0) -> None:
        self._ttl = ttl_seconds
        self._lock = Lock()
        self._store: dict[tuple, tuple[Any, float]] = {}

    async def get(self, key: tuple) -> Any | None:
        now = time.monotonic()
        async with self._lock:
            entry = self._store.get(key)
            if not entry:
                return None
            value, expires_at = entry
            if expires_at <= now:
                self._store.pop(key, None)
                return None
            return value

    async def set(self, key: tuple, value: Any, ttl_seconds: float | None = None) -> None:
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        async with self._lock:
            if ttl <= 0:
                self._store.pop(key, None)
            else:
                self._store[key] = (value, time.monotonic() + ttl)

    async def invalidate_players(self, player_ids: Iterable[str]) -> None:
        ids = {pid for pid in player_ids if pid}
        if not ids:
            return
        async with self._lock:
            stale = [key for key in self._store if ids.intersection(key[1:])]
            for key in stale:
                self._store.pop(key, None)

    async def clear(self) -> None:
        async with self._lock:
            self._store.clear()


stats_cache = TTLCache(ttl_seconds=float(STATS_CACHE_TTL_SECONDS))
