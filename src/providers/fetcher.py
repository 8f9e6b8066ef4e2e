"""
HTTP fetcher for the resolver and catalog. Wraps aiohttp with common defaults,
headers and timeout.

Any transport error, timeout or HTTP status of 400 or above surfaces as FetchFailed.
"""
from __future__ import annotations
import aiohttp
import asyncio
from typing import Optional

from .base import FetchFailed

DEFAULT_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

class Fetcher:
    def __init__(self, *, timeout: float = 10):
        self.timeout = aiohttp.ClientTimeout(total=timeout, connect=4)
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": DEFAULT_UA},
            )
        return self._session

    async def close(self):
        if self._session and not self._session.closed:
            await self._session.close()

    # ── convenience methods ──────────────────

    async def get(
        self,
        url: str,
        *,
        referer: str | None = None,
        headers: dict | None = None,
        params: dict | None = None,
    ) -> str:
        hdrs = dict(headers or {})
        if referer:
            hdrs["Referer"] = referer
        session = await self._get_session()
        try:
            async with session.get(url, headers=hdrs, params=params) as resp:
                if resp.status >= 400:
                    raise FetchFailed(f"GET {url} returned HTTP {resp.status}")
                return await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError) as e:
            raise FetchFailed(f"GET {url} failed: {e!r}") from e

    async def get_json(
        self,
        url: str,
        *,
        headers: dict | None = None,
        params: dict | None = None,
    ) -> dict | list:
        session = await self._get_session()
        try:
            async with session.get(url, headers=headers or {}, params=params) as resp:
                if resp.status >= 400:
                    raise FetchFailed(f"GET {url} returned HTTP {resp.status}")
                return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise FetchFailed(f"GET {url} failed: {e!r}") from e
