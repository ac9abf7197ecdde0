"""In-process TTL cache for normalized provider results.

Entries expire lazily: a stale entry is dropped the first time it is read,
there is no background sweep. There is no size cap either, so memory grows
with the number of distinct queries seen within one TTL window.
"""
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


def cache_key(store: str, query: str, page: int, size: int) -> str:
    return f"S:{store}|q:{query}|p:{page}|s:{size}"


class ResponseCache:
    def __init__(self, default_ttl: float = 45.0, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        hit = self._entries.get(key)
        if hit is None:
            return None
        until, value = hit
        if self._clock() > until:
            del self._entries[key]
            logger.debug("cache expired key=%s", key)
            return None
        return value

    def put(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        # Last write wins; concurrent misses on one key simply overwrite each other.
        ttl = self.default_ttl if ttl is None else ttl
        self._entries[key] = (self._clock() + ttl, value)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
