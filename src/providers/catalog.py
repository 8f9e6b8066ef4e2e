"""
Catalog API client: search, paged episode lists and the per-episode
mirror list whose links are kwik hosting pages.
"""
from __future__ import annotations
import logging

from .base import Anime, CatalogError, Episode, EpisodePage, FetchFailed, SearchPage, StreamItem
from .fetcher import Fetcher
from ..core import config

log = logging.getLogger("kwikstream.providers")


class CatalogClient:
    def __init__(self, fetcher: Fetcher, *, base_url: str | None = None, origin: str | None = None):
        self.fetcher = fetcher
        self.base_url = (base_url or config.CATALOG_API).rstrip("/")
        origin = (origin or config.CATALOG_ORIGIN).rstrip("/")
        self.headers = {"Origin": origin, "Referer": f"{origin}/", "Accept": "application/json"}

    async def _call(self, method: str, **params) -> dict | list:
        try:
            return await self.fetcher.get_json(
                f"{self.base_url}/",
                params={"method": method, **params},
                headers=self.headers,
            )
        except FetchFailed as e:
            raise CatalogError(f"Catalog {method} failed: {e}") from e

    async def search(self, query: str) -> SearchPage:
        data = await self._call("search", query=query)
        try:
            return SearchPage(
                data=[Anime.from_dict(a) for a in data.get("data") or []],
                current_page=data.get("current_page", 1),
                last_page=data.get("last_page", 1),
            )
        except (AttributeError, KeyError, TypeError) as e:
            raise CatalogError(f"Failed to parse search response: {e!r}") from e

    async def episodes(self, session: str, page: int = 1) -> EpisodePage:
        data = await self._call("series", session=session, page=page)
        try:
            return EpisodePage(
                title=data.get("title", ""),
                episodes=[
                    Episode(episode=str(e["episode"]), session=e["session"], snapshot=e.get("snapshot") or "")
                    for e in data.get("episodes") or []
                ],
                page=data.get("page", page),
                total_pages=data.get("total_pages", 1),
                next=bool(data.get("next")),
            )
        except (AttributeError, KeyError, TypeError) as e:
            raise CatalogError(f"Failed to parse episodes response: {e!r}") from e

    async def streams(self, series_session: str, episode_session: str) -> list[StreamItem]:
        data = await self._call("episode", session=series_session, ep=episode_session)
        if not isinstance(data, list):
            raise CatalogError("Failed to parse stream response: expected a list")
        try:
            items = [StreamItem(link=s["link"], name=s.get("name", "")) for s in data]
        except (KeyError, TypeError) as e:
            raise CatalogError(f"Failed to parse stream response: {e!r}") from e
        log.info(f"Catalog returned {len(items)} mirrors for episode {episode_session}")
        return items
