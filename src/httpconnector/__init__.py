"""httpconnector -- an asyncio HTTP client with defaults, hooks, caching and cancellation.

:class:`~httpconnector.client.HttpConnector` wraps a fetch capability
(``httpx`` by default) and gives every verb the same behaviour: client-wide
default headers and timeouts, opt-in response caching keyed by a request
fingerprint, form/JSON body encoding, ``on_request`` / ``on_response`` /
``on_error`` hooks and a ``cancel()`` handle for in-flight calls.

Modules:
    client: The orchestrator, transport adapter and fetch/download boundaries.
    cache: Memory and disk response caches.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with error and exit codes.
    output: stdout/stderr output system with Rich support.
    app: Typer command-line entry point.
"""

__version__ = "0.1.0"

from httpconnector.client import HttpConnector, PendingOperation  # noqa: E402
from httpconnector.exceptions import (  # noqa: E402
    HttpConnectorError,
    HttpStatusError,
    RequestCancelledError,
    RequestTimeoutError,
    TransportError,
)
from httpconnector.models import ClientOptions, RequestConfig, ResponseEnvelope  # noqa: E402

__all__ = [
    "ClientOptions",
    "HttpConnector",
    "HttpConnectorError",
    "HttpStatusError",
    "PendingOperation",
    "RequestCancelledError",
    "RequestConfig",
    "RequestTimeoutError",
    "ResponseEnvelope",
    "TransportError",
    "__version__",
]
