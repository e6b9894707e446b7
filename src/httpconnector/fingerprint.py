"""Deterministic cache keys for request configurations.

The key is a 32-bit rolling hash (``h = h * 31 + c``, signed wraparound)
over the UTF-16 code units of a canonical JSON dump. The arithmetic matches
JavaScript's ``(h << 5) - h + chr`` idiom so keys are reproducible across
implementations. It is not collision resistant: two configs that collide
share a cache entry.
"""

from __future__ import annotations

import json
import struct
from typing import Any

from httpconnector.models import RequestConfig

_MASK = 0xFFFFFFFF


def hash_string(text: str) -> int:
    """Return the signed 32-bit rolling hash of *text*. ``""`` hashes to ``0``."""
    h = 0
    for (unit,) in struct.iter_unpack("<H", text.encode("utf-16-le")):
        h = ((h << 5) - h + unit) & _MASK
    if h & 0x80000000:
        h -= 1 << 32
    return h


def canonical_json(data: Any) -> str:
    """Serialise *data* compactly with sorted keys."""
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def fingerprint(url: str, config: RequestConfig) -> int:
    """Return the cache key for a call to *url* with the effective *config*."""
    payload = {"url": url, **config.model_dump()}
    return hash_string(canonical_json(payload))
