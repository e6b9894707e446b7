"""The fetch boundary: one HTTP exchange, no policy.

:class:`Fetcher` is the capability the transport adapter depends on.
:class:`HttpxFetcher` implements it with :class:`httpx.AsyncClient`; tests
hand it an :class:`httpx.MockTransport`. Timeouts are owned by the layer
above, so the default client is built with ``timeout=None``.
"""

from __future__ import annotations

from typing import Optional, Protocol

import httpx

from httpconnector.exceptions import TransportError


class Fetcher(Protocol):
    """Anything that can perform a single HTTP exchange.

    Implementations must let :class:`asyncio.CancelledError` propagate so
    that in-flight calls can be aborted.
    """

    async def fetch(
        self,
        url: str,
        *,
        method: str,
        headers: dict[str, str],
        body: Optional[str | bytes],
        mode: str,
    ) -> httpx.Response: ...


class HttpxFetcher:
    """:class:`Fetcher` backed by :class:`httpx.AsyncClient`.

    The client is created lazily on first use unless one is supplied. Only
    a lazily created client is closed by :meth:`aclose`.

    ``mode`` is a browser CORS setting and has no meaning for httpx; it is
    accepted and ignored.

    Args:
        client: Pre-configured client to use instead of a private one.
        transport: Transport for the private client (e.g. a mock).
        follow_redirects: Passed to the private client.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        follow_redirects: bool = True,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._transport = transport
        self._follow_redirects = follow_redirects

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                transport=self._transport,
                timeout=None,
                follow_redirects=self._follow_redirects,
            )
        return self._client

    async def fetch(
        self,
        url: str,
        *,
        method: str,
        headers: dict[str, str],
        body: Optional[str | bytes],
        mode: str = "cors",
    ) -> httpx.Response:
        try:
            return await self._get_client().request(
                method, url, headers=headers, content=body,
            )
        except httpx.TransportError as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
