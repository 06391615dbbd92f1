"""HTTP client helper.

Wraps an aiohttp session and maps failures onto the library's exception
hierarchy so callers can tell a 429 apart from every other status.
"""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp

from ...core.exceptions import ProviderError, RateLimitedError

_BODY_PREVIEW = 200


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


class HTTPClient:
    """Async HTTP client wrapper."""

    def __init__(self, base_url: str | None = None, timeout: float = 60.0) -> None:
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    def _url(self, url: str) -> str:
        if self.base_url and not url.startswith("http"):
            return f"{self.base_url}{url}"
        return url

    async def _raise_for_status(self, response: aiohttp.ClientResponse) -> None:
        if response.status < 400:
            return
        body = await response.text(errors="replace")
        message = f"HTTP {response.status} from {response.url}: {body[:_BODY_PREVIEW]}"
        if response.status == 429:
            raise RateLimitedError(
                message, retry_after=_parse_retry_after(response.headers.get("Retry-After"))
            )
        raise ProviderError(message, status_code=response.status)

    async def get_bytes(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> bytes:
        """GET request returning the raw body."""
        try:
            async with self.session.get(self._url(url), params=params, headers=headers) as response:
                await self._raise_for_status(response)
                return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ProviderError(f"GET {url} failed: {e!r}") from e

    async def get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """GET request."""
        try:
            async with self.session.get(self._url(url), params=params, headers=headers) as response:
                await self._raise_for_status(response)
                return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ProviderError(f"GET {url} failed: {e!r}") from e

    async def post_form(self, url: str, data: aiohttp.FormData) -> dict[str, Any]:
        """POST a multipart form and decode the JSON answer."""
        try:
            async with self.session.post(self._url(url), data=data) as response:
                await self._raise_for_status(response)
                return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ProviderError(f"POST {url} failed: {e!r}") from e

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
