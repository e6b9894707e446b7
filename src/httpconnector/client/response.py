"""Response body decoding.

:func:`decode_body` never raises on a malformed body: JSON is tried first
and anything that fails to parse comes back as text.
"""

from __future__ import annotations

from typing import Any

import httpx


async def decode_body(response: httpx.Response) -> Any:
    """Return the JSON-decoded body, or the raw text when it is not JSON.

    An empty body decodes to ``""``.
    """
    await response.aread()
    try:
        return response.json()
    except ValueError:
        return response.text
