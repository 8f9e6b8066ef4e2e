from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel
from typing import Optional
import httpx
import logging

from src.core import config
from src.core.store import WatchStore
from src.providers.base import (
    Anime, CatalogError, FetchFailed, MalformedCipherParameters, NoEmbedPath,
    NoStreamUrl, ResolveError, UnsupportedHost,
)
from src.providers.catalog import CatalogClient
from src.providers.runner import ProviderEngine

config.setup_logging()
log = logging.getLogger("kwikstream.api")

ERROR_STATUS = {
    FetchFailed: 502,
    MalformedCipherParameters: 422,
    NoEmbedPath: 404,
    NoStreamUrl: 404,
    UnsupportedHost: 400,
}

_engine: Optional[ProviderEngine] = None


def get_engine() -> ProviderEngine:
    global _engine
    if _engine is None:
        _engine = ProviderEngine()
    return _engine


def get_catalog(engine: ProviderEngine = Depends(get_engine)) -> CatalogClient:
    return CatalogClient(engine.fetcher)


def get_store() -> WatchStore:
    return WatchStore()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if _engine is not None:
        await _engine.close()


app = FastAPI(title="kwikstream", lifespan=lifespan)


@app.exception_handler(ResolveError)
async def resolve_error_handler(request: Request, exc: ResolveError):
    status = ERROR_STATUS.get(type(exc), 500)
    return JSONResponse(status_code=status, content={"error": exc.kind, "detail": str(exc)})


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    return JSONResponse(status_code=502, content={"error": "CatalogError", "detail": str(exc)})


# --- RESOLVE ---
@app.get("/resolve")
async def resolve(url: str, engine: ProviderEngine = Depends(get_engine)):
    stream = await engine.resolve_stream(url)
    return {"url": url, **stream.to_dict()}


def _proxy_client() -> httpx.AsyncClient:
    return httpx.AsyncClient()


@app.get("/proxy_stream")
async def proxy_stream(url: str, referer: str = None):
    client = _proxy_client()
    headers = {"User-Agent": "Mozilla/5.0", "Referer": referer or f"{config.KWIK_ORIGIN}/"}
    try:
        req = client.build_request("GET", url, headers=headers)
        r = await client.send(req, stream=True)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        await client.aclose()
        raise FetchFailed(f"GET {url} failed: {e!r}") from e
    return StreamingResponse(
        r.aiter_bytes(), status_code=r.status_code, media_type=r.headers.get("content-type"), background=client.aclose
    )


# --- CATALOG ---
@app.get("/search")
async def search(query: str, catalog: CatalogClient = Depends(get_catalog)):
    page = await catalog.search(query)
    return {
        "data": [a.to_dict() for a in page.data],
        "current_page": page.current_page,
        "last_page": page.last_page,
    }


@app.get("/episodes/{session}")
async def episodes(session: str, page: int = 1, catalog: CatalogClient = Depends(get_catalog)):
    result = await catalog.episodes(session, page)
    return {
        "title": result.title,
        "episodes": [e.to_dict() for e in result.episodes],
        "page": result.page,
        "total_pages": result.total_pages,
        "next": result.next,
    }


@app.get("/streams/{series}/{episode}")
async def streams(series: str, episode: str, catalog: CatalogClient = Depends(get_catalog)):
    return [s.to_dict() for s in await catalog.streams(series, episode)]


# --- LIBRARY / HISTORY ---
class AnimeIn(BaseModel):
    id: int
    title: str
    session: str
    status: str = ""
    episodes: Optional[int] = None
    score: Optional[float] = None
    year: Optional[int] = None
    type: Optional[str] = None

    def to_anime(self) -> Anime:
        return Anime(
            id=self.id, title=self.title, session=self.session, status=self.status,
            episodes=self.episodes, score=self.score, year=self.year, anime_type=self.type,
        )


class HistoryIn(BaseModel):
    anime: AnimeIn
    episode_session: str
    episode: str


@app.get("/library")
def read_library(store: WatchStore = Depends(get_store)):
    return [a.to_dict() for a in store.library]


@app.post("/library")
def toggle_library(anime: AnimeIn, store: WatchStore = Depends(get_store)):
    added = store.toggle_library(anime.to_anime())
    return {"session": anime.session, "in_library": added}


@app.get("/history")
def read_history(store: WatchStore = Depends(get_store)):
    return [h.to_dict() for h in store.history]


@app.post("/history")
def record_history(item: HistoryIn, store: WatchStore = Depends(get_store)):
    return store.record_history(item.anime.to_anime(), item.episode_session, item.episode).to_dict()
