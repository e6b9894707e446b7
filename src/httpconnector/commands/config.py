"""``httpconnector config`` -- inspect and edit the client defaults file.

The file holds the lowest-precedence defaults for ``httpconnector request``:
``default_timeout_ms``, ``default_cache_ttl_ms``, ``default_headers``,
``download_dir`` and ``output.format``.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from pydantic import BaseModel, ValidationError

from httpconnector.commands import exits_on_error
from httpconnector.config import global_config_path, load_global_config, save_global_config
from httpconnector.exceptions import InvalidUsageError
from httpconnector.models import GlobalConfig
from httpconnector.output import render_body, status

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
@exits_on_error
def config_show() -> None:
    """Print the effective file contents (defaults filled in)."""
    status(f"# {global_config_path()}")
    render_body(load_global_config().model_dump(mode="json"))


@config_app.command("set")
@exits_on_error
def config_set(
    key: str = typer.Argument(help="Field name; nested fields use dots, e.g. 'output.format'."),
    value: str = typer.Argument(help="New value. JSON literals (5000, null, {...}) are decoded."),
) -> None:
    """Change one field and save the file.

    Example::

        httpconnector config set default_timeout_ms 5000
        httpconnector config set default_headers '{"Accept": "application/json"}'
    """
    updated = _replace(load_global_config(), key.split("."), _decode(value), key)
    save_global_config(updated)
    status(f"{key} = {json.dumps(_decode(value))}")


@config_app.command("reset")
@exits_on_error
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Do not ask for confirmation."),
) -> None:
    """Overwrite the file with the built-in defaults."""
    if not force and not typer.confirm(f"Overwrite {global_config_path()} with defaults?"):
        status("Nothing changed.")
        return
    save_global_config(GlobalConfig())
    status("Defaults restored.")


def _decode(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def _replace(model: BaseModel, path: list[str], value: Any, key: str) -> Any:
    """Return a copy of *model* with the field at *path* set to *value*, re-validated."""
    name, rest = path[0], path[1:]
    if name not in type(model).model_fields:
        raise InvalidUsageError(f"Unknown config key: {key}")
    if rest:
        child = getattr(model, name)
        if not isinstance(child, BaseModel):
            raise InvalidUsageError(f"Unknown config key: {key}")
        value = _replace(child, rest, value, key)
    try:
        return type(model).model_validate({**model.model_dump(), name: value})
    except ValidationError as exc:
        raise InvalidUsageError(
            f"Invalid value for {key}: {exc.errors()[0]['msg']}"
        ) from None
