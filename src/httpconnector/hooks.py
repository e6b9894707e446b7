"""Runner for the client's request, response and error hooks.

The three hooks differ in what they may do:

* ``on_request(config)`` observes the effective
  :class:`~httpconnector.models.RequestConfig`. Its return value is ignored.
* ``on_response(envelope)`` may transform the result. A non-``None``
  return value replaces the envelope handed to the caller.
* ``on_error(exc)`` observes a failure before it is re-raised. It cannot
  recover the call, and an exception raised inside it is logged and
  dropped so the original failure is what the caller sees.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from httpconnector.models import ClientOptions, RequestConfig
from httpconnector.output import TraceEvent, trace


class HookRunner:
    """Invokes whichever hooks are configured, in lifecycle order."""

    def __init__(
        self,
        on_request: Optional[Callable[..., Any]] = None,
        on_response: Optional[Callable[..., Any]] = None,
        on_error: Optional[Callable[..., Any]] = None,
    ) -> None:
        self._on_request = on_request
        self._on_response = on_response
        self._on_error = on_error

    @classmethod
    def from_options(cls, options: ClientOptions) -> HookRunner:
        return cls(
            on_request=options.on_request,
            on_response=options.on_response,
            on_error=options.on_error,
        )

    def run_request(self, config: RequestConfig) -> None:
        if self._on_request is not None:
            self._on_request(config)

    def run_response(self, result: Any) -> Any:
        """Return the hook's replacement for *result*, or *result* itself."""
        if self._on_response is None:
            return result
        replacement = self._on_response(result)
        if replacement is not None:
            return replacement
        return result

    def run_error(self, error: BaseException) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(error)
        except Exception as exc:
            trace(TraceEvent.HOOK_ERROR, f"on_error raised {exc!r} while handling {error!r}")
