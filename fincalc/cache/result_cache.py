"""
Result Cache

Memoizes calculator outputs under a canonical hash of their inputs.

DESIGN DECISION: The cache is an in-process optimization owned by one engine.
- Keys are SHA-256 digests of sorted-key JSON, so field order never matters
- Eviction is FIFO once max_entries is reached
- Entries otherwise live until clear() or invalidate(), unless a TTL is set
- get_or_compute() holds a per-key lock, so concurrent identical requests
  compute once and share the result
"""

import hashlib
import json
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, TypeVar

from pydantic import BaseModel

from fincalc.models.metrics import CacheStats


T = TypeVar("T")


def make_cache_key(name: str, params: Any) -> str:
    """
    Deterministic key for (calculator name, parameters).

    Models are dumped by field name; mappings are serialized with sorted keys.
    """
    if isinstance(params, BaseModel):
        params = params.model_dump(mode="json")
    payload = json.dumps(
        {"function": name, "params": params},
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


@dataclass
class CacheEntry:
    value: Any
    created_at: float
    dependencies: frozenset[str] = field(default_factory=frozenset)
    computation_time_ms: float = 0.0


class ResultCache:
    """Bounded, thread-safe memo table for calculation results."""

    def __init__(
        self,
        max_entries: int = 1000,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._key_locks: dict[str, threading.Lock] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return self.ttl_seconds is not None and now - entry.created_at > self.ttl_seconds

    def _lookup(self, key: str) -> tuple[bool, Any]:
        """Look up without touching the counters."""
        entry = self._entries.get(key)
        if entry is None:
            return False, None
        if self._expired(entry, self._clock()):
            del self._entries[key]
            return False, None
        return True, entry.value

    def get(self, key: str) -> Optional[Any]:
        """Cached value, or None. Counts a hit or a miss."""
        with self._lock:
            found, value = self._lookup(key)
            if found:
                self._hits += 1
                return value
            self._misses += 1
            return None

    def put(
        self,
        key: str,
        value: Any,
        dependencies: Iterable[str] = (),
        computation_time_ms: float = 0.0,
    ) -> None:
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            while len(self._entries) >= self.max_entries:
                self._entries.popitem(last=False)
                self._evictions += 1
            self._entries[key] = CacheEntry(
                value=value,
                created_at=self._clock(),
                dependencies=frozenset(dependencies),
                computation_time_ms=computation_time_ms,
            )

    def get_or_compute(
        self,
        key: str,
        factory: Callable[[], T],
        dependencies: Iterable[str] = (),
    ) -> tuple[T, bool]:
        """
        Return the cached value or compute and store it.

        Returns:
            (value, cache_hit). A factory that raises stores nothing.
        """
        with self._lock:
            found, value = self._lookup(key)
            if found:
                self._hits += 1
                return value, True
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            # another thread may have finished the same computation meanwhile
            with self._lock:
                found, value = self._lookup(key)
                if found:
                    self._hits += 1
                    return value, True
                self._misses += 1

            started = time.perf_counter()
            try:
                value = factory()
                self.put(
                    key,
                    value,
                    dependencies=dependencies,
                    computation_time_ms=(time.perf_counter() - started) * 1000,
                )
            finally:
                with self._lock:
                    self._key_locks.pop(key, None)

            return value, False

    def invalidate(self, dependencies: Iterable[str]) -> int:
        """
        Drop every entry that depends on any of the given ids.

        Returns the number of entries removed.
        """
        targets = set(dependencies)
        with self._lock:
            stale = [
                key for key, entry in self._entries.items()
                if entry.dependencies & targets
            ]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def clear(self) -> None:
        """Remove all entries and reset the hit, miss and eviction counters."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def __contains__(self, key: str) -> bool:
        with self._lock:
            found, _ = self._lookup(key)
            return found

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> CacheStats:
        with self._lock:
            lookups = self._hits + self._misses
            return CacheStats(
                size=len(self._entries),
                max_entries=self.max_entries,
                hits=self._hits,
                misses=self._misses,
                hit_rate=self._hits / lookups if lookups else 0.0,
                evictions=self._evictions,
            )
