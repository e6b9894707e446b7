"""Transport adapter: one HTTP call with body encoding and cancellation.

:func:`send` starts the fetch as its own task and returns a
:class:`PendingOperation` immediately. A :class:`CancellationToken` is
shared between the optional timeout timer and the caller's ``cancel()``;
whichever fires first records its :class:`CancelReason` before cancelling
the fetch, so the resulting :class:`asyncio.CancelledError` can be turned
into :class:`~httpconnector.exceptions.RequestTimeoutError` or
:class:`~httpconnector.exceptions.RequestCancelledError`. Every other
fetcher failure propagates unmodified.
"""

from __future__ import annotations

import asyncio
import enum
import json
from dataclasses import dataclass
from typing import Any, Callable, Generator, Generic, Mapping, Optional, TypeVar

import httpx

from httpconnector.client.fetcher import Fetcher
from httpconnector.exceptions import (
    HttpStatusError,
    RequestCancelledError,
    RequestTimeoutError,
)
from httpconnector.forms import encode_form
from httpconnector.models import RequestConfig
from httpconnector.output import TraceEvent, trace

T = TypeVar("T")

_BODYLESS_METHODS = frozenset({"GET", "HEAD"})
_FORM_METHODS = frozenset({"POST", "PUT"})


class CancelReason(str, enum.Enum):
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


class CancellationToken:
    """Abort handle for a single fetch task.

    The first abort wins: once a reason is recorded, later timer expiries or
    ``cancel()`` calls are ignored, as are aborts after the task finished.
    """

    def __init__(self) -> None:
        self.reason: Optional[CancelReason] = None
        self._task: Optional[asyncio.Task[Any]] = None
        self._timer: Optional[asyncio.TimerHandle] = None

    def bind(self, task: asyncio.Task[Any]) -> None:
        self._task = task

    def arm(self, loop: asyncio.AbstractEventLoop, timeout_ms: float) -> None:
        """Schedule a timeout abort *timeout_ms* milliseconds from now."""
        self._timer = loop.call_later(timeout_ms / 1000, self._abort, CancelReason.TIMEOUT)

    def disarm(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def cancel(self) -> None:
        self._abort(CancelReason.CANCELLED)

    @property
    def armed(self) -> bool:
        return self._timer is not None

    def _abort(self, reason: CancelReason) -> None:
        if self.reason is not None:
            return
        if self._task is None or self._task.done():
            return
        self.reason = reason
        self._task.cancel()


@dataclass
class PendingOperation(Generic[T]):
    """An in-flight call together with its cancel capability.

    Awaiting the operation awaits :attr:`future`.
    """

    future: asyncio.Future[T]
    cancel: Callable[[], None]

    def __await__(self) -> Generator[Any, None, T]:
        return self.future.__await__()


def content_type(headers: Mapping[str, str]) -> str:
    """Return the ``Content-Type`` value, matching the name case-insensitively."""
    value = ""
    for key, header_value in headers.items():
        if key.lower() == "content-type":
            value = header_value
    return value


def encode_body(method: str, headers: Mapping[str, str], body: Any) -> Optional[str | bytes]:
    """Encode *body* for the wire according to *method* and content type.

    * GET and HEAD never carry a body.
    * POST and PUT with a form content type and a mapping body are
      form-encoded.
    * ``str`` and ``bytes`` bodies are sent as-is, not JSON-encoded: a
      string body is taken to be already serialised, and bytes have no
      JSON form.
    * Anything else is serialised to JSON.
    """
    if method in _BODYLESS_METHODS or body is None:
        return None
    if (
        method in _FORM_METHODS
        and "form" in content_type(headers).lower()
        and isinstance(body, Mapping)
    ):
        return encode_form(body)
    if isinstance(body, (str, bytes)):
        return body
    return json.dumps(body)


def send(url: str, config: RequestConfig, fetcher: Fetcher) -> PendingOperation[httpx.Response]:
    """Start one HTTP call and return it with its cancel capability.

    Must be called with a running event loop. The returned future resolves
    to the 2xx :class:`httpx.Response` or fails with
    :class:`~httpconnector.exceptions.HttpStatusError`,
    :class:`~httpconnector.exceptions.RequestTimeoutError`,
    :class:`~httpconnector.exceptions.RequestCancelledError`, or whatever
    the fetcher raised.

    Args:
        url: Fully resolved URL, query string included.
        config: Descriptor supplying ``method``, ``headers``, ``body``,
            ``mode`` and ``timeout_ms``.
        fetcher: The fetch capability to use.
    """
    loop = asyncio.get_running_loop()
    method = config.method.upper()
    headers = dict(config.headers)
    body = encode_body(method, headers, config.body)

    token = CancellationToken()
    fetch_task = loop.create_task(
        fetcher.fetch(url, method=method, headers=headers, body=body, mode=config.mode)
    )
    token.bind(fetch_task)
    if config.timeout_ms:
        token.arm(loop, config.timeout_ms)

    future = loop.create_task(_settle(fetch_task, token, method, url, config.timeout_ms))
    return PendingOperation(future=future, cancel=token.cancel)


async def _settle(
    fetch_task: asyncio.Task[httpx.Response],
    token: CancellationToken,
    method: str,
    url: str,
    timeout_ms: Optional[float],
) -> httpx.Response:
    try:
        response = await fetch_task
    except asyncio.CancelledError:
        if token.reason is CancelReason.TIMEOUT:
            trace(TraceEvent.TIMEOUT, f"{method} {url} after {timeout_ms}ms")
            raise RequestTimeoutError(timeout_ms or 0) from None
        if token.reason is CancelReason.CANCELLED:
            trace(TraceEvent.CANCEL, f"{method} {url}")
            raise RequestCancelledError() from None
        raise
    finally:
        token.disarm()

    if not response.is_success:
        raise HttpStatusError(response.status_code, response.reason_phrase)
    return response
