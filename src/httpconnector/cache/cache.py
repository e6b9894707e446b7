"""Time-bounded response caches keyed by request fingerprint.

Entries are ``(stored_at, envelope)`` pairs. The time-to-live is supplied
on every lookup rather than at store time, so two calls that share a
fingerprint but ask for different freshness each get the answer they asked
for. An entry is a hit only while ``now - stored_at < ttl``.

A single :class:`MemoryResponseCache` is shared process-wide through
:func:`get_default_cache`; clients built without an explicit ``cache``
argument all read and write it.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from httpconnector.models import ResponseEnvelope


class ResponseCache(ABC):
    """Interface every cache backend implements."""

    @abstractmethod
    def lookup(self, fingerprint: int, ttl_ms: float) -> Optional[ResponseEnvelope]:
        """Return the envelope stored under *fingerprint* if younger than *ttl_ms*."""
        ...

    @abstractmethod
    def store(self, fingerprint: int, response: ResponseEnvelope) -> None:
        """Store *response* under *fingerprint*, replacing any previous entry."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove every entry."""
        ...


class MemoryResponseCache(ResponseCache):
    """In-process cache backed by a dict.

    Expired entries are evicted when a lookup finds them stale.

    Args:
        clock: Monotonic clock in seconds. Tests inject a fake one.

    Example::

        cache = MemoryResponseCache()
        cache.store(key, envelope)
        cache.lookup(key, ttl_ms=100)  # envelope for the next 100ms, then None
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[int, tuple[float, ResponseEnvelope]] = {}

    def lookup(self, fingerprint: int, ttl_ms: float) -> Optional[ResponseEnvelope]:
        entry = self._entries.get(fingerprint)
        if entry is None:
            return None
        stored_at, response = entry
        if (self._clock() - stored_at) * 1000 >= ttl_ms:
            del self._entries[fingerprint]
            return None
        return response

    def store(self, fingerprint: int, response: ResponseEnvelope) -> None:
        self._entries[fingerprint] = (self._clock(), response)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, fingerprint: object) -> bool:
        return fingerprint in self._entries


# ------------------------------------------------------------------ #
# Process-wide default instance
# ------------------------------------------------------------------ #

_default_cache: Optional[ResponseCache] = None


def get_default_cache() -> ResponseCache:
    """Return the shared cache, creating a :class:`MemoryResponseCache` lazily."""
    global _default_cache
    if _default_cache is None:
        _default_cache = MemoryResponseCache()
    return _default_cache


def set_default_cache(cache: ResponseCache) -> None:
    """Install *cache* as the instance shared by clients without their own."""
    global _default_cache
    _default_cache = cache


def reset_default_cache() -> None:
    """Drop the shared cache. Used by test suites."""
    global _default_cache
    _default_cache = None
