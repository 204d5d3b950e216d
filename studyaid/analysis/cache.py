"""In-memory cache for generated study material, shared by all workers."""

import copy
import hashlib
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from studyaid.logging.logger import Log

T = TypeVar("T")

CacheKey = tuple[str, int, str]


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    stored_at: float


def make_cache_key(operation: str, user_id: int, signature: str) -> CacheKey:
    """Build a compact key from the operation, the user and the request signature."""
    digest = hashlib.sha256(signature.encode("utf-8")).hexdigest()
    return (operation, user_id, digest)


class AnalysisCache:
    """Thread-safe TTL + LRU cache with per-key request coalescing.

    Concurrent ``get_or_compute`` calls for the same key run ``compute`` once;
    the other callers wait and receive the cached value.
    Values are copied in and out, so callers never share a cached instance.
    """

    def __init__(
        self,
        ttl_seconds: float = 1800,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._max_entries = max(1, max_entries)
        self._clock = clock
        self._entries: OrderedDict[CacheKey, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        # key -> [lock, number of callers holding or waiting on it]
        self._key_locks: dict[CacheKey, list[Any]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: CacheKey) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry):
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return copy.deepcopy(entry.value)

    def set(self, key: CacheKey, value: Any) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value=copy.deepcopy(value), stored_at=self._clock())
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                Log.debug(f"Cache evicted {evicted[0]} entry for user {evicted[1]}")

    def get_or_compute(
        self,
        operation: str,
        user_id: int,
        signature: str,
        compute: Callable[[], T],
    ) -> tuple[T, bool]:
        """Return ``(value, hit)``; on a miss ``compute`` runs and its result is stored.

        Exceptions from ``compute`` propagate and nothing is cached.
        """
        key = make_cache_key(operation, user_id, signature)
        cached = self.get(key)
        if cached is not None:
            Log.info(f"Cache HIT for {operation} (user {user_id})")
            return cached, True

        key_lock = self._acquire_key_lock(key)
        try:
            with key_lock:
                cached = self.get(key)
                if cached is not None:
                    Log.info(f"Cache HIT for {operation} (user {user_id}) after waiting")
                    return cached, True
                Log.info(f"Cache MISS for {operation} (user {user_id})")
                value = compute()
                self.set(key, value)
                return value, False
        finally:
            self._release_key_lock(key)

    def invalidate_user(self, user_id: int) -> int:
        """Drop every entry belonging to ``user_id``. Returns the number removed."""
        with self._lock:
            keys = [key for key in self._entries if key[1] == user_id]
            for key in keys:
                del self._entries[key]
        if keys:
            Log.info(f"Invalidated {len(keys)} cache entries for user {user_id}")
        return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _expired(self, entry: CacheEntry) -> bool:
        return self._ttl_seconds > 0 and self._clock() - entry.stored_at >= self._ttl_seconds

    def _acquire_key_lock(self, key: CacheKey) -> threading.Lock:
        with self._lock:
            slot = self._key_locks.get(key)
            if slot is None:
                slot = [threading.Lock(), 0]
                self._key_locks[key] = slot
            slot[1] += 1
            return slot[0]

    def _release_key_lock(self, key: CacheKey) -> None:
        with self._lock:
            slot = self._key_locks[key]
            slot[1] -= 1
            if slot[1] == 0:
                del self._key_locks[key]
