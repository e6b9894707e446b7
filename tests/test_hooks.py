"""Tests for the hook runner."""

from __future__ import annotations

from unittest.mock import MagicMock

from httpconnector.hooks import HookRunner
from httpconnector.models import ClientOptions, RequestConfig, ResponseEnvelope
from httpconnector.output import OutputManager, TraceEvent, set_output


class TestHookRunner:
    def test_no_hooks_is_passthrough(self) -> None:
        runner = HookRunner()
        envelope = ResponseEnvelope(ok=True, status=200)

        runner.run_request(RequestConfig())
        runner.run_error(ValueError("x"))
        assert runner.run_response(envelope) is envelope

    def test_from_options(self) -> None:
        on_request = MagicMock()
        on_response = MagicMock(return_value=None)
        on_error = MagicMock()
        runner = HookRunner.from_options(
            ClientOptions(on_request=on_request, on_response=on_response, on_error=on_error)
        )
        config = RequestConfig()
        exc = RuntimeError("boom")

        runner.run_request(config)
        runner.run_response("result")
        runner.run_error(exc)

        on_request.assert_called_once_with(config)
        on_response.assert_called_once_with("result")
        on_error.assert_called_once_with(exc)

    def test_request_hook_return_value_ignored(self) -> None:
        runner = HookRunner(on_request=lambda config: "ignored")
        assert runner.run_request(RequestConfig()) is None

    def test_response_replacement(self) -> None:
        runner = HookRunner(on_response=lambda result: {"wrapped": result})
        assert runner.run_response(1) == {"wrapped": 1}

    def test_falsy_replacement_is_kept(self) -> None:
        runner = HookRunner(on_response=lambda result: 0)
        assert runner.run_response("original") == 0

    def test_response_none_keeps_original(self) -> None:
        runner = HookRunner(on_response=lambda result: None)
        assert runner.run_response("original") == "original"

    def test_error_hook_exception_is_logged_not_raised(self) -> None:
        output = MagicMock(spec=OutputManager)
        set_output(output)

        def broken(exc: BaseException) -> None:
            raise KeyError("inner")

        HookRunner(on_error=broken).run_error(ValueError("outer"))

        output.trace.assert_called_once()
        event, message = output.trace.call_args.args
        assert event is TraceEvent.HOOK_ERROR
        assert "inner" in message
        assert "outer" in message
