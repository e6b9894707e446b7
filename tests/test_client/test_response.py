"""Tests for response body decoding."""

from __future__ import annotations

import asyncio

import httpx

from httpconnector.client.response import decode_body


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_response(status_code: int = 200, **kwargs: object) -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        request=httpx.Request("GET", "https://api.example.com/test"),
        **kwargs,
    )


# ---------------------------------------------------------------------------
# decode_body
# ---------------------------------------------------------------------------


class TestDecodeBody:
    def test_json_object(self) -> None:
        response = _make_response(json={"key": "value", "nested": {"a": 1}})
        assert asyncio.run(decode_body(response)) == {"key": "value", "nested": {"a": 1}}

    def test_json_list(self) -> None:
        assert asyncio.run(decode_body(_make_response(json=[1, 2, 3]))) == [1, 2, 3]

    def test_json_without_content_type(self) -> None:
        response = _make_response(content=b'{"key": "value"}')
        assert asyncio.run(decode_body(response)) == {"key": "value"}

    def test_fallback_to_text(self) -> None:
        response = _make_response(text="This is not JSON")
        assert asyncio.run(decode_body(response)) == "This is not JSON"

    def test_truncated_json_falls_back_to_text(self) -> None:
        response = _make_response(
            content=b'{"a": [1, 2',
            headers={"content-type": "application/json"},
        )
        assert asyncio.run(decode_body(response)) == '{"a": [1, 2'

    def test_empty_body(self) -> None:
        assert asyncio.run(decode_body(_make_response(204, content=b""))) == ""

