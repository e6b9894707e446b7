"""The download boundary: hand a binary payload and a filename to the host.

A downloader is any callable ``(payload: bytes, filename: str) -> None``.
:class:`FileDownloader` is the default and saves the payload into the
configured downloads directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from httpconnector.config import atomic_write, get_download_dir
from httpconnector.exceptions import InvalidUsageError
from httpconnector.output import TraceEvent, trace

Downloader = Callable[[bytes, str], None]


class FileDownloader:
    """Write downloaded payloads to *directory*.

    Only the final path component of the suggested filename is used, so a
    server-influenced name cannot escape the downloads directory.

    Args:
        directory: Target directory. Resolved through
            :func:`~httpconnector.config.get_download_dir` when omitted.
    """

    def __init__(self, directory: Optional[str | Path] = None) -> None:
        self._directory = Path(directory) if directory is not None else None

    def __call__(self, payload: bytes, filename: str) -> None:
        name = Path(filename).name
        if not name:
            raise InvalidUsageError(f"Invalid download filename: {filename!r}")
        directory = self._directory or get_download_dir()
        target = directory / name
        atomic_write(target, payload)
        trace(TraceEvent.DOWNLOAD, f"{len(payload)} bytes -> {target}")
