"""Disk-backed response cache.

Uses :mod:`diskcache` so cached envelopes survive between processes, which
is what the command line wants: two ``httpconnector request`` invocations a
second apart can share a response. Entries are stamped with wall-clock
time because monotonic clocks are not comparable across processes.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Callable, Optional

import diskcache

from httpconnector.cache.cache import ResponseCache
from httpconnector.models import ResponseEnvelope


class DiskResponseCache(ResponseCache):
    """Store envelopes in a :class:`diskcache.Cache` under ``<cache_dir>/responses``.

    Stale entries are left in place until the next successful call with the
    same fingerprint overwrites them.

    Args:
        cache_dir: Root directory for the cache.
        clock: Wall clock in seconds.
    """

    def __init__(
        self,
        cache_dir: str | Path,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._cache_dir = Path(cache_dir)
        self._clock = clock
        self._cache = diskcache.Cache(str(self._cache_dir / "responses"))

    def lookup(self, fingerprint: int, ttl_ms: float) -> Optional[ResponseEnvelope]:
        entry: Optional[dict[str, Any]] = self._cache.get(str(fingerprint))
        if entry is None:
            return None
        if (self._clock() - entry["stored_at"]) * 1000 >= ttl_ms:
            return None
        return ResponseEnvelope.model_validate(entry["response"])

    def store(self, fingerprint: int, response: ResponseEnvelope) -> None:
        self._cache.set(
            str(fingerprint),
            {"stored_at": self._clock(), "response": response.model_dump(mode="json")},
        )

    def clear(self) -> None:
        self._cache.clear()

    def stats(self) -> dict[str, Any]:
        """Return the entry count and cache directory."""
        return {
            "size": len(self._cache),
            "directory": str(self._cache_dir / "responses"),
        }

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache`."""
        self._cache.close()
