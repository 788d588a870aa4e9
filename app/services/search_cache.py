from collections import OrderedDict
from functools import lru_cache
from time import monotonic
from typing import Callable

from app.core.config import get_settings
from app.schemas.common import PinRecord

CacheKey = tuple[str, int, str]


class SearchCache:
    """LRU cache with per-entry expiry for normalized search results.

    Only touched from the event loop thread, so no lock is taken.
    """

    def __init__(self, max_entries: int = 256, ttl_seconds: float = 600, clock: Callable[[], float] = monotonic):
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._store: OrderedDict[CacheKey, tuple[float, list[PinRecord]]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: CacheKey) -> list[PinRecord] | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        expires_at, items = entry
        if self._clock() >= expires_at:
            self._store.pop(key, None)
            return None
        self._store.move_to_end(key)
        return items

    def set(self, key: CacheKey, items: list[PinRecord]) -> None:
        self._store[key] = (self._clock() + self.ttl_seconds, list(items))
        self._store.move_to_end(key)
        while len(self._store) > self.max_entries:
            self._store.popitem(last=False)

    def clear(self) -> None:
        self._store.clear()


@lru_cache
def get_search_cache() -> SearchCache:
    settings = get_settings()
    return SearchCache(settings.search_cache_max_entries, settings.search_cache_ttl_seconds)
