"""
Provider engine. Picks the embed scraper for a hosting URL and resolves it
to a direct stream.

Usage:
    engine = ProviderEngine()
    playlist = await engine.resolve("https://kwik.cx/f/abc123")
    await engine.close()
"""
from __future__ import annotations
import asyncio
import logging
from typing import Optional

from .base import EmbedResult, FetchFailed, NoStreamUrl, ResolveError, Stream, UnsupportedHost
from .fetcher import Fetcher
from ..core import config

log = logging.getLogger("kwikstream.providers")


# ──────────────────────────────
#  Scraper registry
# ──────────────────────────────
class _EmbedScraper:
    id: str
    name: str
    rank: int

    def handles(self, url: str) -> bool:
        raise NotImplementedError

    async def scrape(self, url: str, fetcher: Fetcher) -> EmbedResult:
        raise NotImplementedError


# Global registry, populated when embed modules are imported
_EMBEDS: dict[str, _EmbedScraper] = {}


def register_embed(scraper):
    """Decorator to register an embed scraper class."""
    inst = scraper()
    _EMBEDS[inst.id] = inst
    return scraper


# ──────────────────────────────
#  Engine
# ──────────────────────────────
class ProviderEngine:
    def __init__(self, *, timeout: int | None = None, resolve_timeout: int | None = None,
                 fetcher: Fetcher | None = None, embeds: dict | None = None):
        self.fetcher = fetcher or Fetcher(timeout=timeout or config.REQUEST_TIMEOUT)
        self.resolve_timeout = resolve_timeout or config.RESOLVE_TIMEOUT
        self.embeds = embeds if embeds is not None else _EMBEDS

    async def close(self):
        await self.fetcher.close()

    def embed_for(self, url: str) -> Optional[_EmbedScraper]:
        return next((e for e in self.embeds.values() if e.handles(url)), None)

    async def resolve_stream(self, url: str) -> Stream:
        """Resolve a hosting page to a Stream (playlist + headers). Raises ResolveError."""
        scraper = self.embed_for(url)
        if not scraper:
            raise UnsupportedHost(f"No embed scraper handles {url}")

        try:
            log.info(f"[{scraper.id}] Resolving embed...")
            out = await asyncio.wait_for(scraper.scrape(url, self.fetcher), timeout=self.resolve_timeout)
        except asyncio.TimeoutError as e:
            log.warning(f"[{scraper.id}] Timed out after {self.resolve_timeout}s")
            raise FetchFailed(f"Resolving {url} timed out") from e
        except ResolveError as e:
            log.warning(f"[{scraper.id}] Embed failed: {e.kind}: {e}")
            raise

        for stream in out.streams:
            if self._valid(stream):
                return stream
        raise NoStreamUrl(f"{scraper.id} returned no playable stream")

    async def resolve(self, url: str) -> str:
        """Resolve a hosting page URL to its .m3u8 manifest URL. Raises ResolveError."""
        return (await self.resolve_stream(url)).playlist

    @staticmethod
    def _valid(stream: Stream) -> bool:
        return bool(stream.playlist)


# ──────────────────────────────
#  Import all scrapers to register them
# ──────────────────────────────
def _load_scrapers():
    from .embeds import kwik            # noqa: F401

_load_scrapers()
