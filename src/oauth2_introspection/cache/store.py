"""Byte-oriented key-value stores with per-key absolute expiration.

``DistributedStore`` is the interface the claims cache talks to. The
in-memory implementation keeps entries in an OrderedDict with lazy expiry
on read and LRU eviction once ``max_size`` is reached; it is meant for
single-process deployments and tests. ``RedisDistributedStore`` (in
``cache.redis_store``) is the shared backend.
"""

from __future__ import annotations

from collections import OrderedDict
from datetime import datetime, timezone
from threading import Lock
from typing import Callable, Optional, Protocol, runtime_checkable

DEFAULT_MAX_SIZE = 10_000

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@runtime_checkable
class DistributedStore(Protocol):
    """Protocol for the external cache backend."""

    async def get(self, key: str) -> bytes | None:
        """Return the bytes stored under ``key``, or None if absent or expired."""
        ...

    async def set(self, key: str, value: bytes, absolute_expiration: datetime) -> None:
        """Store ``value`` under ``key`` until ``absolute_expiration`` (timezone-aware)."""
        ...

    async def remove(self, key: str) -> None:
        """Drop ``key`` if present."""
        ...


class _StoreEntry:
    """Stored bytes with their absolute expiration."""

    def __init__(self, value: bytes, expires_at: datetime) -> None:
        self.value = value
        self.expires_at = expires_at

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class InMemoryDistributedStore:
    """Thread-safe in-memory DistributedStore.

    Example:
        >>> from datetime import timedelta
        >>> store = InMemoryDistributedStore(max_size=100)
        >>> await store.set("key", b"value", utc_now() + timedelta(minutes=1))
        >>> await store.get("key")
        b'value'
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE, clock: Clock = utc_now) -> None:
        self._entries: OrderedDict[str, _StoreEntry] = OrderedDict()
        self._lock = Lock()
        self._max_size = max_size
        self._clock = clock

    async def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return entry.value

    async def set(self, key: str, value: bytes, absolute_expiration: datetime) -> None:
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif self._max_size > 0:
                while len(self._entries) >= self._max_size:
                    self._entries.popitem(last=False)
            self._entries[key] = _StoreEntry(value, absolute_expiration)

    async def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def expiration_of(self, key: str) -> Optional[datetime]:
        """Return the absolute expiration stored for ``key`` (ignores expiry)."""
        with self._lock:
            entry = self._entries.get(key)
            return entry.expires_at if entry is not None else None

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def max_size(self) -> int:
        return self._max_size

    def clear_all(self) -> None:
        with self._lock:
            self._entries.clear()

    def cleanup_expired(self) -> int:
        """Remove all expired entries.

        Holds the lock for O(N).

        Returns:
            Number of expired entries removed
        """
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
            return len(expired)
