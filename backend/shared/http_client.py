"""
HTTP client utilities for talking to external cue providers.
"""

import asyncio
from typing import Any

import aiohttp


class AsyncHTTPClient:
    """Async HTTP client used by remote caption providers."""

    def __init__(self, timeout: int = 30) -> None:
        """Initialize HTTP client."""
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "AsyncHTTPClient":
        """Enter async context manager."""
        self.session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        if self.session:
            await self.session.close()

    @staticmethod
    async def _prepare_request(coro_or_ctx: Any) -> Any:
        """Normalize aiohttp request result to an async context manager."""
        if asyncio.iscoroutine(coro_or_ctx):
            return await coro_or_ctx
        return coro_or_ctx

    @staticmethod
    async def _ensure_response_ok(response: Any) -> None:
        """Invoke raise_for_status, awaiting when necessary."""
        result = response.raise_for_status()
        if asyncio.iscoroutine(result):
            await result

    async def get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, Any] | None = None,
    ) -> Any:
        """Perform a GET request and decode the JSON body."""
        if not self.session:
            raise RuntimeError("HTTP client not initialized. Use async context manager.")

        request_ctx = await self._prepare_request(
            self.session.get(url, params=params, headers=headers)
        )
        async with request_ctx as response:
            await self._ensure_response_ok(response)
            return await response.json()
