"""Terminal output for request results and the client's trace channel.

Response bodies are the only thing written to stdout, so
``httpconnector request ... | jq`` works. Status lines, errors and the
trace go to stderr.

The client library never prints directly. It reports what it does through
:func:`trace` with a :class:`TraceEvent` (cache hit, cache store, timeout,
cancellation, download, hook failure). Trace lines are shown only by a
verbose :class:`OutputManager`; the default manager drops them.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Iterator, TextIO

from rich.console import Console
from rich.syntax import Syntax
from rich.text import Text

from httpconnector.models import ResponseEnvelope


class OutputFormat(str, Enum):
    """How response bodies are rendered.

    ``AUTO`` picks ``RICH`` for a colour-capable terminal and ``PLAIN``
    everywhere else.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class TraceEvent(str, Enum):
    """Things the client reports on the trace channel."""

    REQUEST = "request"
    CACHE_HIT = "cache-hit"
    CACHE_STORE = "cache-store"
    TIMEOUT = "timeout"
    CANCEL = "cancel"
    DOWNLOAD = "download"
    HOOK_ERROR = "hook-error"


class OutputManager:
    """Renders results on stdout and diagnostics on stderr.

    Args:
        format: Body format. ``AUTO`` is resolved once, at construction.
        no_color: Write diagnostics as bare text and render bodies without
            highlighting.
        quiet: Drop status lines. Errors and bodies are always written.
        verbose: Write trace lines.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _color_disabled()
        self._quiet = quiet
        self._verbose = verbose
        if format == OutputFormat.AUTO:
            rich_ok = _stdout_is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format
        self._console = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Results
    # ------------------------------------------------------------------ #

    def render(self, result: Any) -> None:
        """Write a request result.

        An envelope produces a ``HTTP <status> <text>`` status line and, unless
        it marks a download, its body. Any other value (what an
        ``on_response`` hook substituted) is rendered as a body.
        """
        if not isinstance(result, ResponseEnvelope):
            self.render_body(result)
            return
        self.status(f"HTTP {result.status} {result.status_text}".rstrip())
        if not result.download:
            self.render_body(result.body)

    def render_body(self, data: Any) -> None:
        """Write a decoded body to stdout in the active format."""
        if self._format == OutputFormat.RICH:
            self._render_rich(data)
            return
        if self._format == OutputFormat.JSON:
            lines: Iterator[str] = iter([_as_json(data)])
        else:
            lines = _plain_lines(data)
        for line in lines:
            sys.stdout.write(line + "\n")
        sys.stdout.flush()

    # ------------------------------------------------------------------ #
    # Diagnostics
    # ------------------------------------------------------------------ #

    def status(self, message: str) -> None:
        if not self._quiet:
            self._emit(message, "cyan")

    def error(self, message: str) -> None:
        self._emit(f"Error: {message}", "bold red")

    def trace(self, event: TraceEvent, detail: str) -> None:
        if self._verbose:
            self._emit(f"[trace] {event.value} {detail}", "dim")

    def _emit(self, text: str, style: str) -> None:
        stream: TextIO = sys.stderr
        if self._no_color:
            stream.write(text + "\n")
            stream.flush()
            return
        # Text() is never parsed as markup.
        Console(file=stream, stderr=True).print(Text(text, style=style))

    def _render_rich(self, data: Any) -> None:
        if isinstance(data, (dict, list)):
            self._console.print(Syntax(_as_json(data), "json", theme="monokai", word_wrap=True))
        else:
            self._console.print(Text("" if data is None else str(data)))


def _as_json(data: Any) -> str:
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError:
            return data
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _plain_lines(data: Any) -> Iterator[str]:
    """Yield tab-separated lines: one per key for a mapping, one per item for a list."""
    if isinstance(data, dict):
        for key, value in data.items():
            yield f"{key}\t{value}"
    elif isinstance(data, list):
        for item in data:
            yield "\t".join(map(str, item.values())) if isinstance(item, dict) else str(item)
    else:
        yield "" if data is None else str(data)


def _stdout_is_tty() -> bool:
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _color_disabled() -> bool:
    """``NO_COLOR`` (any value, even empty) or ``TERM=dumb`` turns colour off."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Active manager
# ------------------------------------------------------------------ #

_active: list[OutputManager] = []


def get_output() -> OutputManager:
    """Return the active manager, installing a default one on first use."""
    if not _active:
        _active.append(OutputManager())
    return _active[0]


def set_output(output: OutputManager) -> None:
    _active[:] = [output]


def reset_output() -> None:
    _active.clear()


def render(result: Any) -> None:
    get_output().render(result)


def render_body(data: Any) -> None:
    get_output().render_body(data)


def status(message: str) -> None:
    get_output().status(message)


def error(message: str) -> None:
    get_output().error(message)


def trace(event: TraceEvent, detail: str) -> None:
    get_output().trace(event, detail)
