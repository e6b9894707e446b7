"""Numeric process exit codes for the ``httpconnector`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~httpconnector.exceptions.HttpConnectorError`
subclass. Shell scripts can inspect the exit code to tell a timeout from
an HTTP failure without parsing stderr.

Example::

    $ httpconnector request GET https://api.example.com/slow --timeout 50
    $ echo $?
    7   # EXIT_TIMEOUT -- the request did not settle within 50ms
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_HTTP_ERROR = 5
"""The server answered with a non-2xx status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (DNS failure, connection refused, reset)."""

EXIT_TIMEOUT = 7
"""The request was aborted by its timeout."""

EXIT_CANCELLED = 8
"""The request was cancelled before it settled."""
