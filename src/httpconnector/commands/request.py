"""The ``httpconnector request`` command -- send one request and print the result.

Client defaults (timeout, cache TTL, headers) are resolved through
:func:`~httpconnector.config.resolve_client_options`, so ``--timeout``,
``--cache`` and ``--header`` override the environment and the global
config. Cached responses are kept in a
:class:`~httpconnector.cache.DiskResponseCache` so they survive between
invocations.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import typer

from httpconnector.cache import DiskResponseCache
from httpconnector.client import FileDownloader, HttpConnector, HttpxFetcher
from httpconnector.config import get_cache_dir, get_download_dir, resolve_client_options
from httpconnector.commands import exits_on_error
from httpconnector.exceptions import InvalidUsageError
from httpconnector.models import RequestConfig
from httpconnector.output import TraceEvent, render, trace

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@exits_on_error
def request_command(
    method: str = typer.Argument(help="HTTP method (GET, POST, PUT, PATCH, DELETE, OPTIONS, HEAD)."),
    url: str = typer.Argument(help="Target URL."),
    data: Optional[str] = typer.Option(
        None, "--data", "-d", help="Request body. Parsed as JSON when possible."
    ),
    header: list[str] = typer.Option(
        [], "--header", "-H", help="Extra header as 'Name: value'. Repeatable."
    ),
    query: Optional[str] = typer.Option(None, "--query", help="Query string to append."),
    form: bool = typer.Option(False, "--form", help="Send the body form-encoded."),
    timeout_ms: Optional[float] = typer.Option(
        None, "--timeout", help="Abort after this many milliseconds."
    ),
    cache_ttl_ms: Optional[float] = typer.Option(
        None, "--cache", help="Reuse a cached response younger than this many milliseconds."
    ),
    download: Optional[str] = typer.Option(
        None, "--download", help="Save the response body under this filename."
    ),
) -> None:
    """Send an HTTP request and print the response body.

    Example::

        httpconnector request GET https://api.example.com/users --query page=2
        httpconnector request POST https://api.example.com/login -d '{"user": "a"}' --form
    """
    headers = _parse_headers(header)
    if form:
        headers.setdefault("Content-Type", _FORM_CONTENT_TYPE)
    global_cfg, options = resolve_client_options(
        cli_timeout_ms=timeout_ms,
        cli_cache_ttl_ms=cache_ttl_ms,
        cli_headers=headers,
        on_request=_trace_request,
    )
    config = RequestConfig(
        method=method.upper(),
        body=_parse_body(data),
        query=query,
        download=download,
    )

    cache = DiskResponseCache(get_cache_dir())
    try:
        client = HttpConnector(
            options,
            fetcher=HttpxFetcher(),
            cache=cache,
            downloader=FileDownloader(get_download_dir(global_cfg)),
        )
        result = asyncio.run(_send(client, url, config))
    finally:
        cache.close()

    render(result)


async def _send(client: HttpConnector, url: str, config: RequestConfig) -> Any:
    async with client:
        return await client.request(url, config)


def _trace_request(config: RequestConfig) -> None:
    trace(TraceEvent.REQUEST, f"{config.method} headers={config.headers} timeout_ms={config.timeout_ms}")


def _parse_headers(values: list[str]) -> dict[str, str]:
    """Parse ``Name: value`` strings into a dict."""
    headers: dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise InvalidUsageError(f"Invalid header {raw!r}; expected 'Name: value'")
        headers[name.strip()] = value.strip()
    return headers


def _parse_body(body: Optional[str]) -> Any:  # noqa: ANN401
    """Parse *body* as JSON if possible, returning the raw string on failure."""
    if body is None:
        return None
    try:
        return json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return body
