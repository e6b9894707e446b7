"""Canonical Pydantic models shared across all httpconnector modules.

The models fall into two groups:

**Request/response models** -- built per call by the orchestrator:
    :class:`RequestConfig` and :class:`ResponseEnvelope`.

**Configuration models** -- set once per client or persisted as JSON in
the user's config directory:
    :class:`ClientOptions`, :class:`OutputConfig` and :class:`GlobalConfig`.
"""

from __future__ import annotations

from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Request / response ---


class RequestConfig(BaseModel):
    """Options for a single call to :meth:`~httpconnector.client.HttpConnector.request`.

    Unknown keys are rejected, so a misspelt option such as ``timeout``
    (for ``timeout_ms``) fails instead of being dropped.
    """

    model_config = ConfigDict(extra="forbid")

    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None
    mode: Literal["cors", "no-cors", "same-origin"] = "cors"
    timeout_ms: Optional[float] = Field(
        default=None, description="Abort the call after this many milliseconds"
    )
    cache_ttl_ms: Optional[float] = Field(
        default=None, description="Serve identical calls from cache for this long"
    )
    query: Optional[str | dict[str, Any]] = None
    download: Optional[str] = Field(
        default=None, description="Save the body under this filename instead of decoding it"
    )


class ResponseEnvelope(BaseModel):
    """Normalised response handed to callers and stored in the cache.

    ``body`` holds the decoded JSON value, or the raw text when the body is
    not JSON. Envelopes produced by the download path have ``download`` set
    and no body.
    """

    ok: bool
    status: int
    status_text: str = ""
    body: Any = None
    download: bool = False


# --- Configuration ---


class ClientOptions(BaseModel):
    """Per-client hooks and defaults, immutable after construction.

    Defaults take precedence over the per-call values of the same name
    whenever they are set.
    """

    model_config = ConfigDict(frozen=True)

    on_request: Optional[Callable[..., Any]] = None
    on_response: Optional[Callable[..., Any]] = None
    on_error: Optional[Callable[..., Any]] = None
    default_timeout_ms: Optional[float] = None
    default_headers: Optional[dict[str, str]] = None
    default_cache_ttl_ms: Optional[float] = None


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/httpconnector/config.json``.

    Loaded and saved by :func:`~httpconnector.config.load_global_config`
    and :func:`~httpconnector.config.save_global_config`. Values here have
    the lowest precedence; see
    :func:`~httpconnector.config.resolve_client_options`.
    """

    default_timeout_ms: Optional[float] = None
    default_cache_ttl_ms: Optional[float] = None
    default_headers: dict[str, str] = Field(default_factory=dict)
    download_dir: Optional[str] = Field(
        default=None, description="Directory downloaded files are written to"
    )
    output: OutputConfig = Field(default_factory=OutputConfig)
