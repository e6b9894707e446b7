"""Exception hierarchy for httpconnector.

All exceptions inherit from :class:`HttpConnectorError`, which carries a
``code`` attribute that callers inspect to tell timeouts and cancellations
apart from genuine HTTP failures, plus an ``exit_code`` mapped to a
constant from :mod:`httpconnector.exit_codes` for the command line.

Subclass hierarchy::

    HttpConnectorError       (exit 1)
    +-- InvalidUsageError    (exit 2)
    +-- ConfigError          (exit 1)
    +-- HttpStatusError      (exit 5, code = HTTP status)
    +-- TransportError       (exit 6)
    +-- RequestTimeoutError  (exit 7, code 1408)
    +-- RequestCancelledError (exit 8, code 1409)
"""

from __future__ import annotations

from typing import Optional

from httpconnector.exit_codes import (
    EXIT_CANCELLED,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_HTTP_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_TIMEOUT,
)

TIMEOUT_CODE = 1408
CANCELLED_CODE = 1409


class HttpConnectorError(Exception):
    """Base exception for all httpconnector errors.

    Args:
        message: Human-readable error description.
        code: Optional machine-readable error code.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE
    code: Optional[int] = None

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        exit_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(HttpConnectorError):
    """Raised for invalid CLI arguments or malformed request options."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(HttpConnectorError):
    """Raised for configuration problems (invalid JSON, bad env values)."""

    exit_code = EXIT_GENERIC_FAILURE


class HttpStatusError(HttpConnectorError):
    """Raised when the server answers with a non-2xx status.

    The numeric status doubles as :attr:`code`.
    """

    exit_code = EXIT_HTTP_ERROR

    def __init__(self, status: int, status_text: str = "") -> None:
        message = f"HTTP {status} {status_text}".rstrip()
        super().__init__(message, code=status)
        self.status = status
        self.status_text = status_text


class TransportError(HttpConnectorError):
    """Raised on network-level failures (DNS resolution, refused connection).

    The originating transport exception is available as ``__cause__``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class RequestTimeoutError(HttpConnectorError):
    """Raised when a request is aborted by its timeout."""

    exit_code = EXIT_TIMEOUT
    code = TIMEOUT_CODE

    def __init__(self, timeout_ms: float) -> None:
        super().__init__(f"Timeout error. [{_format_ms(timeout_ms)}ms]")
        self.timeout_ms = timeout_ms


class RequestCancelledError(HttpConnectorError):
    """Raised when a request is cancelled through its ``cancel()`` capability."""

    exit_code = EXIT_CANCELLED
    code = CANCELLED_CODE

    def __init__(self) -> None:
        super().__init__("Request canceled.")


def _format_ms(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)
