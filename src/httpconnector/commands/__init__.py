"""Built-in sub-commands for the httpconnector CLI."""

from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

import typer

from httpconnector.exceptions import HttpConnectorError
from httpconnector.output import error

F = TypeVar("F", bound=Callable[..., Any])


def exits_on_error(command: F) -> F:
    """Report an :class:`HttpConnectorError` on stderr and exit with its ``exit_code``."""

    @functools.wraps(command)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return command(*args, **kwargs)
        except HttpConnectorError as exc:
            error(str(exc))
            raise typer.Exit(code=exc.exit_code) from None

    return wrapper  # type: ignore[return-value]
