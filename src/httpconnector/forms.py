"""Form and query-string encoding.

:func:`encode_form` percent-encodes values the way browsers'
``encodeURIComponent`` does, so form bodies are byte-identical to those
produced by browser clients. :func:`encode_query` does not encode
values; query mappings must already be URL safe.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
from urllib.parse import quote

# Characters encodeURIComponent leaves alone on top of quote()'s defaults.
_COMPONENT_SAFE = "!*'()"


def _stringify(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_form(data: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Encode *data* as ``application/x-www-form-urlencoded``.

    Keys keep the mapping's iteration order and are emitted as-is; values are
    percent-encoded.

    Args:
        data: Flat key/value mapping, or ``None``.

    Returns:
        The encoded string, or ``None`` when *data* is ``None`` or empty.

    Example::

        >>> encode_form({"a": "1", "b": "x y"})
        'a=1&b=x%20y'
    """
    if not data:
        return None
    return "&".join(
        f"{key}={quote(_stringify(value), safe=_COMPONENT_SAFE)}"
        for key, value in data.items()
    )


def encode_query(query: Optional[str | Mapping[str, Any]]) -> Optional[str]:
    """Resolve a ``query`` option into a query string.

    Strings pass through verbatim. Mappings become ``key=value`` pairs joined
    by ``&`` in iteration order, without percent-encoding.
    """
    if not query:
        return None
    if isinstance(query, str):
        return query
    return "&".join(f"{key}={_stringify(value)}" for key, value in query.items())


def append_query(url: str, query: Optional[str | Mapping[str, Any]]) -> str:
    """Append *query* to *url* with ``?`` or ``&`` as appropriate."""
    encoded = encode_query(query)
    if not encoded:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{encoded}"
