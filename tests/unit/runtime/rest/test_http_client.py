"""Unit tests for HTTPClient.

Tests focus on session management and status-to-exception mapping.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from aiohttp import test_utils, web

from sheetalbum.core import FetchError, ProviderError, RateLimitedError
from sheetalbum.runtime.rest import HTTPClient, RetryPolicy, fetch_with_retry


def _mock_response(status: int = 200, body: bytes = b"", json_data=None, headers=None):
    response = AsyncMock()
    response.status = status
    response.url = "https://example.com/export"
    response.headers = headers or {}
    response.read = AsyncMock(return_value=body)
    response.text = AsyncMock(
        side_effect=lambda encoding=None, errors="strict": body.decode(encoding or "utf-8", errors)
    )
    response.json = AsyncMock(return_value=json_data)
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=None)
    return response


def _client_with(response=None, error: Exception | None = None) -> tuple[HTTPClient, MagicMock]:
    client = HTTPClient()
    session = MagicMock()
    session.closed = False
    if error is not None:
        session.get = MagicMock(side_effect=error)
        session.post = MagicMock(side_effect=error)
    else:
        session.get = MagicMock(return_value=response)
        session.post = MagicMock(return_value=response)
    client._session = session
    return client, session


class TestHTTPClientSessionManagement:
    """Test HTTPClient session management."""

    def test_init(self):
        """Test HTTPClient initialization."""
        client = HTTPClient(timeout=10.0)
        assert client.timeout.total == 10.0
        assert client._session is None

    @pytest.mark.asyncio
    async def test_session_property_creates_session(self):
        """Test session property creates session when needed."""
        client = HTTPClient()
        session = client.session
        assert isinstance(session, aiohttp.ClientSession)
        assert client._session is session
        await client.close()

    @pytest.mark.asyncio
    async def test_session_property_recreates_closed_session(self):
        """Test session property recreates closed session."""
        client = HTTPClient()
        session1 = client.session
        await session1.close()

        session2 = client.session
        assert session1 is not session2
        assert not session2.closed
        await client.close()

    @pytest.mark.asyncio
    async def test_close_idempotent(self):
        """Test close() can be called multiple times."""
        client = HTTPClient()
        await client.close()
        await client.close()

    @pytest.mark.asyncio
    async def test_context_manager(self):
        """Test HTTPClient as async context manager."""
        async with HTTPClient() as client:
            assert client.session is not None

        assert client._session is None or client._session.closed

    def test_base_url_prefix(self):
        client = HTTPClient(base_url="https://sheets.example.com")
        assert client._url("/v4/x") == "https://sheets.example.com/v4/x"
        assert client._url("https://other.example.com/y") == "https://other.example.com/y"


class TestHTTPClientStatusMapping:
    """Test how HTTP failures map onto the exception hierarchy."""

    @pytest.mark.asyncio
    async def test_get_bytes_success(self):
        client, session = _client_with(_mock_response(body=b"%PDF-1.4"))

        data = await client.get_bytes("https://example.com/export", params={"gid": "0"})

        assert data == b"%PDF-1.4"
        session.get.assert_called_once_with(
            "https://example.com/export", params={"gid": "0"}, headers=None
        )

    @pytest.mark.asyncio
    async def test_429_raises_rate_limited_with_retry_after(self):
        client, _ = _client_with(
            _mock_response(status=429, body=b"Too Many Requests", headers={"Retry-After": "7"})
        )

        with pytest.raises(RateLimitedError) as exc_info:
            await client.get_bytes("https://example.com/export")

        assert exc_info.value.status_code == 429
        assert exc_info.value.retry_after == 7.0

    @pytest.mark.asyncio
    async def test_429_without_retry_after(self):
        client, _ = _client_with(_mock_response(status=429, headers={"Retry-After": "soon"}))

        with pytest.raises(RateLimitedError) as exc_info:
            await client.get_bytes("https://example.com/export")

        assert exc_info.value.retry_after is None

    @pytest.mark.asyncio
    async def test_server_error_is_provider_error(self):
        client, _ = _client_with(_mock_response(status=500, body=b"backend exploded"))

        with pytest.raises(ProviderError) as exc_info:
            await client.get_bytes("https://example.com/export")

        assert not isinstance(exc_info.value, RateLimitedError)
        assert exc_info.value.status_code == 500
        assert "backend exploded" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_get_json_forbidden(self):
        client, _ = _client_with(_mock_response(status=403, body=b"denied"))

        with pytest.raises(ProviderError) as exc_info:
            await client.get_json("https://example.com/values")

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_client_error_wrapped(self):
        client, _ = _client_with(error=aiohttp.ClientConnectionError("connection reset"))

        with pytest.raises(ProviderError) as exc_info:
            await client.get_bytes("https://example.com/export")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, aiohttp.ClientError)

    @pytest.mark.asyncio
    async def test_post_form_returns_json(self):
        client, session = _client_with(_mock_response(json_data={"ok": True}))
        form = aiohttp.FormData()
        form.add_field("chat_id", "1")

        answer = await client.post_form("https://example.com/send", form)

        assert answer == {"ok": True}
        session.post.assert_called_once_with("https://example.com/send", data=form)

    @pytest.mark.asyncio
    async def test_binary_error_body_still_mapped(self):
        client, _ = _client_with(_mock_response(status=429, body=b"\xff\xfe\x00binary"))

        with pytest.raises(RateLimitedError) as exc_info:
            await client.get_bytes("https://example.com/export")

        assert exc_info.value.status_code == 429


class TestHTTPClientAgainstServer:
    """Test HTTPClient against a local aiohttp server."""

    @pytest.mark.asyncio
    async def test_binary_429_body_is_retried(self):
        """Test a 429 with an undecodable body goes through the retry loop."""
        hits = 0

        async def export(request: web.Request) -> web.Response:
            nonlocal hits
            hits += 1
            return web.Response(
                status=429, body=b"\xff\xfe\x00binary", content_type="application/pdf"
            )

        app = web.Application()
        app.router.add_get("/export", export)

        async with test_utils.TestServer(app) as server, HTTPClient(timeout=5.0) as http:
            url = str(server.make_url("/export"))
            with pytest.raises(FetchError) as exc_info:
                await fetch_with_retry(
                    lambda: http.get_bytes(url),
                    RetryPolicy(max_attempts=2, base_delay_s=0.0, jitter_s=0.0),
                )

        assert hits == 2
        assert exc_info.value.status_code == 429
        assert exc_info.value.attempts == 2
