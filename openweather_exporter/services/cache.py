from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

import structlog

from ..errors import CacheWriteError

logger = structlog.get_logger()

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class TTLCache(Generic[K, V]):
    """Thread-safe in-memory cache with a fixed expiry per entry.

    Expiry is computed once from the insertion time; reads never extend it.
    Expired entries are dropped lazily when read or when room is needed.
    """

    def __init__(
        self,
        max_entries: Optional[int] = None,
        time_func: Callable[[], float] = time.monotonic,
    ) -> None:
        self._time_func = time_func
        self._max_entries = max_entries
        self._lock = threading.Lock()
        # key -> (expires_at, value)
        self._store: Dict[K, Tuple[float, V]] = {}

    def get(self, key: K) -> Optional[V]:
        with self._lock:
            item = self._store.get(key)
            if item is None:
                return None
            expires_at, value = item
            if self._time_func() >= expires_at:
                del self._store[key]
                return None
            return value

    def set(self, key: K, value: V, ttl: float) -> None:
        if ttl <= 0:
            raise CacheWriteError(f"ttl must be > 0, got {ttl}")
        with self._lock:
            now = self._time_func()
            if self._max_entries is not None and key not in self._store:
                if len(self._store) >= self._max_entries:
                    self._purge_expired(now)
                if len(self._store) >= self._max_entries:
                    raise CacheWriteError(f"cache full ({self._max_entries} entries)")
            self._store[key] = (now + ttl, value)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired(self._time_func())
            return len(self._store)

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._store.items() if now >= expires_at]
        for k in expired:
            del self._store[k]
        if expired:
            logger.debug("cache_purged", count=len(expired))
