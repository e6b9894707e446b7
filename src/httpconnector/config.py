"""Configuration management with XDG paths, atomic writes and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.httpconnector/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir` and :func:`get_download_dir`.
* **Global config** -- a single :class:`~httpconnector.models.GlobalConfig`
  JSON file holding client defaults.
* **Precedence resolution** -- :func:`resolve_client_options` merges CLI
  flags, environment variables and the global config into the
  :class:`~httpconnector.models.ClientOptions` a client is built with.

All file writes, including downloaded payloads, go through
:func:`atomic_write` (temp file then rename).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from httpconnector.exceptions import ConfigError
from httpconnector.models import ClientOptions, GlobalConfig

_APP_NAME = "httpconnector"
_CONFIG_FILENAME = "config.json"

ENV_TIMEOUT_MS = "HTTPCONNECTOR_TIMEOUT_MS"
ENV_CACHE_TTL_MS = "HTTPCONNECTOR_CACHE_TTL_MS"
ENV_DOWNLOAD_DIR = "HTTPCONNECTOR_DOWNLOAD_DIR"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on platforms that follow the XDG Base Directory layout."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from *env_var*, falling back under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/httpconnector/`` (default
    ``~/.config/httpconnector/``). Elsewhere: ``~/.httpconnector/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory used by the disk response cache.

    On Linux/BSD: ``$XDG_CACHE_HOME/httpconnector/``. Elsewhere:
    ``~/.httpconnector/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary."""
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_download_dir(config: Optional[GlobalConfig] = None) -> Path:
    """Return the directory downloaded files are written to.

    Precedence: ``HTTPCONNECTOR_DOWNLOAD_DIR``, then ``config.download_dir``,
    then ``<data_dir>/downloads``.
    """
    env_value = os.environ.get(ENV_DOWNLOAD_DIR, "")
    if env_value:
        path = Path(env_value)
    elif config is not None and config.download_dir:
        path = Path(config.download_dir).expanduser()
    else:
        path = get_data_dir() / "downloads"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str | bytes) -> None:
    """Write *data* to *path* atomically using a temp file and rename.

    The temp file lives in the destination directory so ``os.replace`` is an
    atomic rename on POSIX. It is removed on any failure.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    binary = isinstance(data, bytes)
    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="wb" if binary else "w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding=None if binary else "utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def global_config_path() -> Path:
    """Return the path of the global JSON config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration, or defaults when no file exists.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically."""
    data = config.model_dump(mode="json")
    atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def _env_ms(name: str) -> Optional[float]:
    value = os.environ.get(name, "").strip()
    if not value:
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number of milliseconds, got: {value!r}") from exc


def resolve_client_options(
    cli_timeout_ms: Optional[float] = None,
    cli_cache_ttl_ms: Optional[float] = None,
    cli_headers: Optional[dict[str, str]] = None,
    **hooks: Any,
) -> tuple[GlobalConfig, ClientOptions]:
    """Resolve client defaults through the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_timeout_ms``, ``cli_cache_ttl_ms``, ``cli_headers``)
        2. Environment variables (``HTTPCONNECTOR_TIMEOUT_MS``,
           ``HTTPCONNECTOR_CACHE_TTL_MS``)
        3. User config (``~/.config/httpconnector/config.json``)
        4. Defaults (no timeout, no caching, no headers)

    CLI headers are layered over the configured default headers rather than
    replacing them.

    Args:
        **hooks: ``on_request`` / ``on_response`` / ``on_error`` callables
            passed through to :class:`~httpconnector.models.ClientOptions`.

    Returns:
        A tuple of ``(global_config, client_options)``.
    """
    global_cfg = load_global_config()

    timeout_ms = global_cfg.default_timeout_ms
    cache_ttl_ms = global_cfg.default_cache_ttl_ms

    env_timeout = _env_ms(ENV_TIMEOUT_MS)
    if env_timeout is not None:
        timeout_ms = env_timeout
    env_cache = _env_ms(ENV_CACHE_TTL_MS)
    if env_cache is not None:
        cache_ttl_ms = env_cache

    if cli_timeout_ms is not None:
        timeout_ms = cli_timeout_ms
    if cli_cache_ttl_ms is not None:
        cache_ttl_ms = cli_cache_ttl_ms

    headers = {**global_cfg.default_headers, **(cli_headers or {})}

    options = ClientOptions(
        default_timeout_ms=timeout_ms,
        default_cache_ttl_ms=cache_ttl_ms,
        default_headers=headers or None,
        **hooks,
    )
    return global_cfg, options
