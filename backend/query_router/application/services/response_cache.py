"""Thread-safe, size-bounded cache of processed query responses."""

import threading
from collections import OrderedDict
from typing import Any

from query_router.domain.entities import QueryResponse

# (session id, normalized text)
CacheKey = tuple[str | None, str]


class ResponseCache:
    """Maps (session id, normalized query text) to a previously computed QueryResponse.

    When the cache is full the oldest half of the entries is dropped.
    Entries never expire otherwise; they are cleared on lexicon reload.
    """

    def __init__(self, max_size: int = 1000):
        self.max_size = max(1, max_size)
        self._entries: OrderedDict[CacheKey, QueryResponse] = OrderedDict()
        self._lock = threading.RLock()

    @staticmethod
    def key_for(text: str, session_id: str | None = None) -> CacheKey:
        return session_id or None, " ".join(text.lower().split())

    def get(self, key: CacheKey) -> QueryResponse | None:
        with self._lock:
            response = self._entries.get(key)
            if response is not None:
                self._entries.move_to_end(key)
            return response

    def set(self, key: CacheKey, response: QueryResponse) -> None:
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_size:
                self._evict_oldest_half()
            self._entries[key] = response
            self._entries.move_to_end(key)

    def clear(self) -> int:
        """Remove every entry; returns how many were dropped."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
            return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "size": len(self._entries),
                "max_size": self.max_size,
            }

    def _evict_oldest_half(self) -> None:
        for _ in range(max(1, len(self._entries) // 2)):
            self._entries.popitem(last=False)
