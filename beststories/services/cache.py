"""In-memory cache with per-entry expiration and optional LRU eviction."""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from typing import Any


class TTLCache:
    """Thread-safe in-memory cache with per-entry expiry and max-size eviction.

    Keys may be any hashable value, so string constants and integer ids
    share one namespace.  Each entry carries an absolute expiry instant
    (or none at all) computed from the ``ttl`` passed to ``set``.

    Usage::

        cache = TTLCache(max_size=500)
        cache.set("key", value, ttl=60)
        cache.set("pinned", other)  # never expires
        hit = cache.get("key")  # returns value or None if expired/missing
    """

    def __init__(
        self,
        max_size: int | None = None,
        clock: Callable[[], float] = time.time,
        sweep_interval: float = 60,
    ) -> None:
        self._max_size = max_size
        self._clock = clock
        # Expired entries are reclaimed on write, at most once per interval
        self._sweep_interval = sweep_interval
        self._next_sweep = 0.0
        self._lock = threading.Lock()
        # OrderedDict preserves insertion order for LRU eviction
        self._store: OrderedDict[Hashable, tuple[Any, float | None]] = OrderedDict()

    def _is_live(self, expires_at: float | None, now: float) -> bool:
        return expires_at is None or now < expires_at

    def get(self, key: Hashable) -> Any | None:
        """Return the cached value if present and not expired, else None."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if not self._is_live(expires_at, self._clock()):
                del self._store[key]
                return None
            # Move to end (most recently used)
            self._store.move_to_end(key)
            return value

    def set(self, key: Hashable, value: Any, ttl: float | None = None) -> None:
        """Store *value* under *key*, expiring after *ttl* seconds (None = never).

        Overwrites any existing entry.  Expired entries are swept first (at
        most once per ``sweep_interval``), then the least recently used
        entries are evicted if a ``max_size`` is configured and exceeded.
        """
        now = self._clock()
        expires_at = now + ttl if ttl is not None else None
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            if key in self._store:
                self._store.move_to_end(key)
            self._store[key] = (value, expires_at)
            if self._max_size is not None:
                while len(self._store) > self._max_size:
                    self._store.popitem(last=False)

    def _sweep(self, now: float) -> None:
        """Drop every expired entry.  Caller holds the lock."""
        expired = [
            key
            for key, (_, expires_at) in self._store.items()
            if not self._is_live(expires_at, now)
        ]
        for key in expired:
            del self._store[key]
        self._next_sweep = now + self._sweep_interval

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        """Number of live (unexpired) entries."""
        with self._lock:
            now = self._clock()
            return sum(
                1 for _, expires_at in self._store.values() if self._is_live(expires_at, now)
            )

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
