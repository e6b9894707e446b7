"""Request orchestrator with defaults, hooks, caching and cancellation.

:class:`HttpConnector` is the public entry point. Each call to
:meth:`HttpConnector.request` runs this pipeline:

1. **Defaults** -- client-level headers, timeout and cache TTL are merged
   over the per-call config. A client default, when set, wins.
2. **Request hook** -- ``on_request`` observes the effective config.
3. **Query** -- ``query`` is resolved and appended to the URL.
4. **Cache lookup** -- cache-eligible calls consult the response cache by
   fingerprint; a hit resolves immediately without touching the network.
5. **Transport** -- :func:`~httpconnector.client.transport.send`.
6. **Success** -- the body is either handed to the downloader or decoded,
   the envelope is cached, and ``on_response`` may substitute the result.
7. **Failure** -- ``on_error`` observes the exception, which is re-raised.

See Also:
    :mod:`httpconnector.client.transport` for the cancellation model.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Mapping, Optional, Union

import httpx
from pydantic import ValidationError

from httpconnector.cache import ResponseCache, get_default_cache
from httpconnector.client.download import Downloader, FileDownloader
from httpconnector.client.fetcher import Fetcher, HttpxFetcher
from httpconnector.client.response import decode_body
from httpconnector.client.transport import PendingOperation, send
from httpconnector.exceptions import InvalidUsageError
from httpconnector.fingerprint import fingerprint
from httpconnector.forms import append_query
from httpconnector.hooks import HookRunner
from httpconnector.models import ClientOptions, RequestConfig, ResponseEnvelope
from httpconnector.output import TraceEvent, trace

ConfigLike = Union[RequestConfig, Mapping[str, Any], None]
RequestResult = Union[Awaitable[Any], PendingOperation[Any]]


def _noop() -> None:
    return None


class HttpConnector:
    """Asynchronous HTTP client for API calls.

    Every request method returns immediately: an awaitable for the result
    or, with ``cancelable=True``, a :class:`PendingOperation` that also
    exposes ``cancel()``. They must be called while an event loop is
    running.

    Args:
        options: Hooks and defaults. Keyword arguments matching
            :class:`~httpconnector.models.ClientOptions` fields may be
            given instead of (or on top of) this object.
        fetcher: Fetch capability. Defaults to an :class:`HttpxFetcher`.
        cache: Response cache. Defaults to the process-wide instance from
            :func:`~httpconnector.cache.get_default_cache`, shared by every
            client that is not given its own.
        downloader: Receives ``(payload, filename)`` for calls configured
            with ``download``, in a worker thread so file writes do not block
            the event loop. Defaults to a :class:`FileDownloader`.

    Example::

        async with HttpConnector(default_timeout_ms=5000) as client:
            envelope = await client.get("https://api.example.com/users")

            op = client.get("https://api.example.com/slow", cancelable=True)
            op.cancel()
    """

    def __init__(
        self,
        options: Optional[ClientOptions] = None,
        *,
        fetcher: Optional[Fetcher] = None,
        cache: Optional[ResponseCache] = None,
        downloader: Optional[Downloader] = None,
        **option_fields: Any,
    ) -> None:
        if options is None:
            options = ClientOptions(**option_fields)
        elif option_fields:
            options = options.model_copy(update=option_fields)
        self._options = options
        self._hooks = HookRunner.from_options(options)
        self._fetcher: Fetcher = fetcher if fetcher is not None else HttpxFetcher()
        self._cache = cache
        self._downloader: Downloader = downloader if downloader is not None else FileDownloader()

    @property
    def client_options(self) -> ClientOptions:
        return self._options

    @property
    def cache(self) -> ResponseCache:
        """The cache this client reads and writes."""
        if self._cache is not None:
            return self._cache
        return get_default_cache()

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> HttpConnector:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the fetcher if it holds resources."""
        aclose = getattr(self._fetcher, "aclose", None)
        if aclose is not None:
            await aclose()

    # ------------------------------------------------------------------ #
    # Verb shorthands
    # ------------------------------------------------------------------ #

    def get(self, url: str, options: ConfigLike = None, cancelable: bool = False) -> RequestResult:
        return self.request(url, _with_fields(options, method="GET"), cancelable)

    def post(
        self, url: str, data: Any = None, options: ConfigLike = None, cancelable: bool = False,
    ) -> RequestResult:
        return self.request(url, _with_fields(options, method="POST", body=data), cancelable)

    def put(
        self, url: str, data: Any = None, options: ConfigLike = None, cancelable: bool = False,
    ) -> RequestResult:
        return self.request(url, _with_fields(options, method="PUT", body=data), cancelable)

    def patch(
        self, url: str, data: Any = None, options: ConfigLike = None, cancelable: bool = False,
    ) -> RequestResult:
        return self.request(url, _with_fields(options, method="PATCH", body=data), cancelable)

    def delete(self, url: str, options: ConfigLike = None, cancelable: bool = False) -> RequestResult:
        return self.request(url, _with_fields(options, method="DELETE"), cancelable)

    def options(self, url: str, options: ConfigLike = None, cancelable: bool = False) -> RequestResult:
        return self.request(url, _with_fields(options, method="OPTIONS"), cancelable)

    def head(self, url: str, options: ConfigLike = None, cancelable: bool = False) -> RequestResult:
        return self.request(url, _with_fields(options, method="HEAD"), cancelable)

    # ------------------------------------------------------------------ #
    # Orchestration
    # ------------------------------------------------------------------ #

    def request(self, url: str, config: ConfigLike = None, cancelable: bool = False) -> RequestResult:
        """Issue a request through the hook, cache and transport pipeline.

        Args:
            url: Target URL. It may already carry a query string.
            config: A :class:`~httpconnector.models.RequestConfig` or a
                mapping of its fields.
            cancelable: Return a :class:`PendingOperation` instead of a
                bare awaitable.

        Returns:
            An awaitable resolving to a
            :class:`~httpconnector.models.ResponseEnvelope` (or whatever
            ``on_response`` substituted), or a :class:`PendingOperation`
            wrapping it.

        Raises:
            RuntimeError: If no event loop is running.
            InvalidUsageError: If *config* is a mapping with unknown keys or
                invalid values.
        """
        loop = asyncio.get_running_loop()
        effective = self._effective_config(config)

        self._hooks.run_request(effective.model_copy(deep=True))

        target = append_query(url, effective.query)
        ttl_ms = effective.cache_ttl_ms
        key: Optional[int] = None

        if ttl_ms:
            key = fingerprint(url, effective)
            cached = self.cache.lookup(key, ttl_ms)
            if cached is not None:
                trace(TraceEvent.CACHE_HIT, f"{effective.method.upper()} {target} key={key}")
                future = self._resolved(loop, cached)
                return PendingOperation(future=future, cancel=_noop) if cancelable else future

        pending = send(target, effective.model_copy(update={"query": None}), self._fetcher)
        future = loop.create_task(self._complete(pending.future, effective, target, key))
        if cancelable:
            return PendingOperation(future=future, cancel=pending.cancel)
        return future

    def _effective_config(self, config: ConfigLike) -> RequestConfig:
        if config is None:
            config = RequestConfig()
        elif not isinstance(config, RequestConfig):
            try:
                config = RequestConfig.model_validate(dict(config))
            except ValidationError as exc:
                raise InvalidUsageError(f"Invalid request options: {_describe(exc)}") from exc

        defaults = self._options
        return config.model_copy(
            update={
                "headers": dict(
                    defaults.default_headers if defaults.default_headers is not None else config.headers
                ),
                "timeout_ms": defaults.default_timeout_ms or config.timeout_ms or None,
                "cache_ttl_ms": defaults.default_cache_ttl_ms or config.cache_ttl_ms or None,
            }
        )

    def _resolved(self, loop: asyncio.AbstractEventLoop, cached: ResponseEnvelope) -> asyncio.Future[Any]:
        future: asyncio.Future[Any] = loop.create_future()
        try:
            future.set_result(self._hooks.run_response(cached.model_copy(deep=True)))
        except Exception as exc:
            future.set_exception(exc)
        return future

    async def _complete(
        self,
        response_future: Awaitable[httpx.Response],
        config: RequestConfig,
        target: str,
        key: Optional[int],
    ) -> Any:
        try:
            response = await response_future

            if config.download:
                payload = await response.aread()
                await asyncio.to_thread(self._downloader, payload, config.download)
                marker = ResponseEnvelope(
                    ok=True,
                    status=response.status_code,
                    status_text=response.reason_phrase,
                    download=True,
                )
                return self._hooks.run_response(marker)

            envelope = ResponseEnvelope(
                ok=response.is_success,
                status=response.status_code,
                status_text=response.reason_phrase,
                body=await decode_body(response),
            )
            if key is not None:
                self.cache.store(key, envelope)
                trace(TraceEvent.CACHE_STORE, f"{config.method.upper()} {target} key={key}")
            return self._hooks.run_response(envelope.model_copy(deep=True))
        except Exception as exc:
            self._hooks.run_error(exc)
            raise


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(map(str, err['loc'])) or 'config'}: {err['msg']}" for err in exc.errors()
    )


def _with_fields(options: ConfigLike, **fields: Any) -> dict[str, Any]:
    if options is None:
        base: dict[str, Any] = {}
    elif isinstance(options, RequestConfig):
        base = options.model_dump(exclude_unset=True)
    else:
        base = dict(options)
    base.update(fields)
    return base
