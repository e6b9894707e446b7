"""End-to-end tests for the ``httpconnector`` command line.

The network is replaced by patching the fetcher factory used by the
``request`` command with one backed by :class:`httpx.MockTransport`.
Every test runs against an isolated XDG tree so the disk cache, the
global config and downloads land under ``tmp_path``.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest
from typer.testing import CliRunner

from httpconnector import __version__
from httpconnector.app import app, main
from httpconnector.client import HttpxFetcher
from httpconnector.config import load_global_config, save_global_config
from httpconnector.models import GlobalConfig

URL = "https://api.example.com/items"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def network(monkeypatch: pytest.MonkeyPatch) -> Callable[[Any], list[httpx.Request]]:
    """Route the request command's traffic to *handler*; return the request log."""

    def _install(handler: Any) -> list[httpx.Request]:
        seen: list[httpx.Request] = []

        async def recording(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            response = handler(request)
            if asyncio.iscoroutine(response):
                response = await response
            return response

        monkeypatch.setattr(
            "httpconnector.commands.request.HttpxFetcher",
            lambda: HttpxFetcher(transport=httpx.MockTransport(recording)),
        )
        return seen

    return _install


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"id": 1, "name": "widget"})


# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------


class TestRootApp:
    def test_unexpected_error_writes_crash_report(self, isolated_config, monkeypatch) -> None:
        def explode() -> None:
            raise RuntimeError("kaboom")

        monkeypatch.setattr("httpconnector.app.app", explode)
        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        reports = list((isolated_config / "data" / "httpconnector" / "crashes").iterdir())
        assert len(reports) == 1
        assert "kaboom" in reports[0].read_text()

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "request" in result.output
        assert "config" in result.output


# ---------------------------------------------------------------------------
# request
# ---------------------------------------------------------------------------


class TestRequestCommand:
    def test_get_prints_json_body(self, runner, network, isolated_config) -> None:
        network(_ok)
        result = runner.invoke(app, ["--json", "request", "GET", URL])

        assert result.exit_code == 0, result.output
        assert '"name": "widget"' in result.output
        assert "HTTP 200 OK" in result.output

    def test_method_is_uppercased(self, runner, network, isolated_config) -> None:
        seen = network(_ok)
        runner.invoke(app, ["request", "delete", URL])
        assert seen[0].method == "DELETE"

    def test_json_data_and_headers(self, runner, network, isolated_config) -> None:
        seen = network(_ok)
        result = runner.invoke(
            app,
            ["request", "POST", URL, "-d", '{"name": "new"}', "-H", "X-Api-Key: secret"],
        )

        assert result.exit_code == 0, result.output
        assert json.loads(seen[0].content) == {"name": "new"}
        assert seen[0].headers["x-api-key"] == "secret"

    def test_form_flag_encodes_body(self, runner, network, isolated_config) -> None:
        seen = network(_ok)
        runner.invoke(app, ["request", "POST", URL, "-d", '{"q": "a b"}', "--form"])

        assert seen[0].content == b"q=a%20b"
        assert seen[0].headers["content-type"] == "application/x-www-form-urlencoded"

    def test_query_appended(self, runner, network, isolated_config) -> None:
        seen = network(_ok)
        runner.invoke(app, ["request", "GET", URL, "--query", "page=2"])
        assert str(seen[0].url) == f"{URL}?page=2"

    def test_config_headers_are_sent(self, runner, network, isolated_config) -> None:
        save_global_config(GlobalConfig(default_headers={"Accept": "application/json"}))
        seen = network(_ok)
        runner.invoke(app, ["request", "GET", URL])
        assert seen[0].headers["accept"] == "application/json"

    def test_invalid_header_exits_2(self, runner, network, isolated_config) -> None:
        seen = network(_ok)
        result = runner.invoke(app, ["request", "GET", URL, "-H", "no-colon"])

        assert result.exit_code == 2
        assert "Invalid header" in result.output
        assert seen == []

    def test_http_error_exits_5(self, runner, network, isolated_config) -> None:
        network(lambda request: httpx.Response(500, json={"error": "boom"}))
        result = runner.invoke(app, ["request", "GET", URL])

        assert result.exit_code == 5
        assert "HTTP 500" in result.output

    def test_connection_error_exits_6(self, runner, network, isolated_config) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        network(refuse)
        assert runner.invoke(app, ["request", "GET", URL]).exit_code == 6

    def test_timeout_exits_7(self, runner, network, isolated_config) -> None:
        async def slow(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200)

        network(slow)
        result = runner.invoke(app, ["request", "GET", URL, "--timeout", "20"])

        assert result.exit_code == 7
        assert "Timeout error. [20ms]" in result.output

    def test_env_timeout_applies(self, runner, network, isolated_config, monkeypatch) -> None:
        async def slow(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200)

        network(slow)
        monkeypatch.setenv("HTTPCONNECTOR_TIMEOUT_MS", "20")
        assert runner.invoke(app, ["request", "GET", URL]).exit_code == 7

    def test_cache_survives_between_invocations(self, runner, network, isolated_config) -> None:
        seen = network(_ok)
        first = runner.invoke(app, ["--json", "request", "GET", URL, "--cache", "60000"])
        second = runner.invoke(app, ["--json", "request", "GET", URL, "--cache", "60000"])

        assert first.exit_code == 0, first.output
        assert second.exit_code == 0, second.output
        assert len(seen) == 1
        assert '"name": "widget"' in second.output

    def test_verbose_traces_cache_hit(self, runner, network, isolated_config) -> None:
        network(_ok)
        args = ["--no-color", "--verbose", "request", "GET", URL, "--cache", "60000"]
        runner.invoke(app, args)
        result = runner.invoke(app, args)

        assert result.exit_code == 0, result.output
        assert "[trace] cache-hit GET" in result.output

    def test_download_writes_file(self, runner, network, isolated_config: Path) -> None:
        network(lambda request: httpx.Response(200, content=b"\x89PNG data"))
        result = runner.invoke(app, ["request", "GET", URL, "--download", "logo.png"])

        assert result.exit_code == 0, result.output
        saved = isolated_config / "data" / "httpconnector" / "downloads" / "logo.png"
        assert saved.read_bytes() == b"\x89PNG data"


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_show_defaults(self, runner, isolated_config) -> None:
        result = runner.invoke(app, ["--json", "config", "show"])
        assert result.exit_code == 0, result.output
        assert '"default_timeout_ms": null' in result.output

    def test_set_number(self, runner, isolated_config) -> None:
        result = runner.invoke(app, ["config", "set", "default_timeout_ms", "5000"])
        assert result.exit_code == 0, result.output
        assert load_global_config().default_timeout_ms == 5000

    def test_set_nested_key(self, runner, isolated_config) -> None:
        runner.invoke(app, ["config", "set", "output.format", "json"])
        assert load_global_config().output.format == "json"

    def test_set_mapping(self, runner, isolated_config) -> None:
        runner.invoke(app, ["config", "set", "default_headers", '{"Accept": "text/plain"}'])
        assert load_global_config().default_headers == {"Accept": "text/plain"}

    def test_set_unknown_key_exits_2(self, runner, isolated_config) -> None:
        result = runner.invoke(app, ["config", "set", "nope", "1"])
        assert result.exit_code == 2
        assert "Unknown config key" in result.output

    def test_set_below_scalar_field_exits_2(self, runner, isolated_config) -> None:
        result = runner.invoke(app, ["config", "set", "output.format.style", "x"])
        assert result.exit_code == 2
        assert "Unknown config key" in result.output

    def test_set_invalid_value_exits_2(self, runner, isolated_config) -> None:
        result = runner.invoke(app, ["config", "set", "default_headers", "[1, 2]"])
        assert result.exit_code == 2
        assert load_global_config().default_headers == {}

    def test_reset_with_force(self, runner, isolated_config) -> None:
        save_global_config(GlobalConfig(default_timeout_ms=10))
        result = runner.invoke(app, ["config", "reset", "--force"])
        assert result.exit_code == 0
        assert load_global_config() == GlobalConfig()

    def test_reset_declined(self, runner, isolated_config) -> None:
        save_global_config(GlobalConfig(default_timeout_ms=10))
        result = runner.invoke(app, ["config", "reset"], input="n\n")
        assert result.exit_code == 0
        assert load_global_config().default_timeout_ms == 10
