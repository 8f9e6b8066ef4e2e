import asyncio
import pytest
from aiohttp import web
from aiohttp import test_utils

from src.providers.base import FetchFailed
from src.providers.fetcher import DEFAULT_UA, Fetcher


async def _echo(request):
    return web.Response(text=f"{request.headers.get('Referer')}|{request.headers.get('User-Agent')}")


async def _gone(request):
    return web.Response(status=404, text="gone")


async def _broken(request):
    return web.Response(status=503, text="down")


async def _slow(request):
    await asyncio.sleep(1)
    return web.Response(text="late")


async def _catalog(request):
    return web.json_response({"method": request.query.get("method")})


async def _not_json(request):
    return web.Response(text="<html>")


def _run(scenario, timeout=5):
    """Start a local server, run `scenario(fetcher, server)`, tear both down."""
    async def _main():
        app = web.Application()
        app.router.add_get("/echo", _echo)
        app.router.add_get("/gone", _gone)
        app.router.add_get("/broken", _broken)
        app.router.add_get("/slow", _slow)
        app.router.add_get("/catalog", _catalog)
        app.router.add_get("/not-json", _not_json)
        server = test_utils.TestServer(app)
        await server.start_server()
        fetcher = Fetcher(timeout=timeout)
        try:
            return await scenario(fetcher, server)
        finally:
            await fetcher.close()
            await server.close()

    return asyncio.run(_main())


def test_get_sends_referer_and_user_agent():
    async def scenario(fetcher, server):
        return await fetcher.get(str(server.make_url("/echo")), referer="https://kwik.cx/f/abc")

    assert _run(scenario) == f"https://kwik.cx/f/abc|{DEFAULT_UA}"


@pytest.mark.parametrize("path,status", [("/gone", 404), ("/broken", 503)])
def test_error_status_raises_fetch_failed(path, status):
    async def scenario(fetcher, server):
        await fetcher.get(str(server.make_url(path)))

    with pytest.raises(FetchFailed, match=f"HTTP {status}"):
        _run(scenario)


def test_connection_error_raises_fetch_failed():
    async def scenario(fetcher, server):
        url = str(server.make_url("/echo"))
        await server.close()
        await fetcher.get(url)

    with pytest.raises(FetchFailed):
        _run(scenario)


def test_timeout_raises_fetch_failed():
    async def scenario(fetcher, server):
        await fetcher.get(str(server.make_url("/slow")))

    with pytest.raises(FetchFailed):
        _run(scenario, timeout=0.2)


def test_get_json():
    async def scenario(fetcher, server):
        return await fetcher.get_json(str(server.make_url("/catalog")), params={"method": "search"})

    assert _run(scenario) == {"method": "search"}


def test_get_json_bad_body_raises_fetch_failed():
    async def scenario(fetcher, server):
        await fetcher.get_json(str(server.make_url("/not-json")))

    with pytest.raises(FetchFailed):
        _run(scenario)
