"""Response caching for httpconnector.

:class:`ResponseCache` is the interface the client depends on.
:class:`MemoryResponseCache` is the default, shared process-wide through
:func:`get_default_cache`; :class:`DiskResponseCache` persists entries with
:mod:`diskcache` for the command line.
"""

from httpconnector.cache.cache import (
    MemoryResponseCache,
    ResponseCache,
    get_default_cache,
    reset_default_cache,
    set_default_cache,
)
from httpconnector.cache.disk import DiskResponseCache

__all__ = [
    "DiskResponseCache",
    "MemoryResponseCache",
    "ResponseCache",
    "get_default_cache",
    "reset_default_cache",
    "set_default_cache",
]
