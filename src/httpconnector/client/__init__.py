"""HTTP client for httpconnector.

:class:`HttpConnector` is the public entry point. It layers client
defaults, hooks, response caching and timeout/cancel handling over a
:class:`Fetcher` (by default :class:`HttpxFetcher`, wrapping
:mod:`httpx`).

Example::

    from httpconnector.client import HttpConnector

    async with HttpConnector(default_timeout_ms=5000) as client:
        envelope = await client.get("https://api.example.com/users")
"""

from httpconnector.client.connector import HttpConnector
from httpconnector.client.download import Downloader, FileDownloader
from httpconnector.client.fetcher import Fetcher, HttpxFetcher
from httpconnector.client.transport import (
    CancellationToken,
    CancelReason,
    PendingOperation,
    send,
)

__all__ = [
    "CancelReason",
    "CancellationToken",
    "Downloader",
    "Fetcher",
    "FileDownloader",
    "HttpConnector",
    "HttpxFetcher",
    "PendingOperation",
    "send",
]
