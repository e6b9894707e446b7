"""Typer application and the ``httpconnector`` console script.

Sub-commands report :class:`~httpconnector.exceptions.HttpConnectorError`
themselves (see :func:`~httpconnector.commands.exits_on_error`). Anything
else that escapes the app is a bug: :func:`main` saves its traceback under
``<data_dir>/crashes`` and exits with the generic failure code.
"""

from __future__ import annotations

import traceback
from datetime import datetime, timezone
from pathlib import Path

import typer

from httpconnector import __version__
from httpconnector.commands.config import config_app
from httpconnector.commands.request import request_command
from httpconnector.config import atomic_write, get_data_dir
from httpconnector.exit_codes import EXIT_GENERIC_FAILURE
from httpconnector.output import OutputFormat, OutputManager, error, set_output

app = typer.Typer(
    name="httpconnector",
    help="Send HTTP requests with default headers, timeouts and response caching.",
    no_args_is_help=True,
    add_completion=False,
)
app.command("request")(request_command)
app.add_typer(config_app, name="config", help="Show or edit the client defaults file.")


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"httpconnector {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True, help="Show version and exit."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print bodies as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Print bodies as tab-separated text."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colour."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Hide the HTTP status line."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Trace requests, cache hits, timeouts and cancellations."
    ),
) -> None:
    """Install the output manager selected by the global flags."""
    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))


def _save_crash_report(exc: BaseException) -> Path:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    path = get_data_dir() / "crashes" / f"{stamp}.txt"
    atomic_write(path, "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return path


def main() -> None:
    """Entry point for the ``httpconnector`` console script."""
    try:
        app()
    except Exception as exc:
        report = _save_crash_report(exc)
        error(f"unexpected {type(exc).__name__}: {exc} (traceback: {report})")
        raise SystemExit(EXIT_GENERIC_FAILURE) from None
