"""Shared test fixtures for httpconnector.

Provides mock-transport builders, an isolated config environment and
autouse resets for the global output manager and the shared response cache.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from httpconnector.cache import MemoryResponseCache, reset_default_cache
from httpconnector.client import HttpConnector, HttpxFetcher
from httpconnector.output import OutputManager, reset_output, set_output


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000


class RecordingDownloader:
    """Downloader that keeps ``(payload, filename)`` pairs instead of writing files."""

    def __init__(self) -> None:
        self.calls: list[tuple[bytes, str]] = []
        self.thread_ids: list[int] = []

    def __call__(self, payload: bytes, filename: str) -> None:
        self.calls.append((payload, filename))
        self.thread_ids.append(threading.get_ident())


# ---------------------------------------------------------------------------
# Global state resets
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_global_state() -> None:
    """Install a quiet output manager and drop the shared cache after every test."""
    set_output(OutputManager(no_color=True, quiet=True))
    yield
    reset_output()
    reset_default_cache()


# ---------------------------------------------------------------------------
# Client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache(clock: FakeClock) -> MemoryResponseCache:
    return MemoryResponseCache(clock=clock)


@pytest.fixture
def downloader() -> RecordingDownloader:
    return RecordingDownloader()


@pytest.fixture
def make_client(
    memory_cache: MemoryResponseCache,
    downloader: RecordingDownloader,
) -> Callable[..., HttpConnector]:
    """Build an :class:`HttpConnector` whose network is *handler*.

    *handler* receives the :class:`httpx.Request` and returns an
    :class:`httpx.Response`; it may be a coroutine function.
    """

    def _make(handler: Callable[[httpx.Request], Any], **kwargs: Any) -> HttpConnector:
        kwargs.setdefault("cache", memory_cache)
        kwargs.setdefault("downloader", downloader)
        fetcher = HttpxFetcher(transport=httpx.MockTransport(handler))
        return HttpConnector(fetcher=fetcher, **kwargs)

    return _make


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every XDG directory at *tmp_path* and clear HTTPCONNECTOR_* env vars."""
    monkeypatch.setattr("httpconnector.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "HTTPCONNECTOR_TIMEOUT_MS",
        "HTTPCONNECTOR_CACHE_TTL_MS",
        "HTTPCONNECTOR_DOWNLOAD_DIR",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path
