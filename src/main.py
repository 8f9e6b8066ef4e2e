"""
Command line front end.

    python -m src.main search "frieren"
    python -m src.main episodes <anime-session> --page 2
    python -m src.main streams <anime-session> <episode-session>
    python -m src.main resolve https://kwik.cx/f/abc123
"""
import argparse
import asyncio
import json
import sys

from src.core import config
from src.core.store import WatchStore
from src.providers.base import CatalogError, ResolveError
from src.providers.catalog import CatalogClient
from src.providers.runner import ProviderEngine


def _print(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


async def run(args) -> int:
    engine = ProviderEngine()
    catalog = CatalogClient(engine.fetcher)
    try:
        if args.command == "search":
            page = await catalog.search(args.query)
            _print([a.to_dict() for a in page.data])
        elif args.command == "episodes":
            result = await catalog.episodes(args.session, args.page)
            print(f"{result.title}, page {result.page}/{result.total_pages}")
            _print([e.to_dict() for e in result.episodes])
        elif args.command == "streams":
            _print([s.to_dict() for s in await catalog.streams(args.series, args.episode)])
        elif args.command == "resolve":
            stream = await engine.resolve_stream(args.url)
            if args.json:
                _print(stream.to_dict())
            else:
                print(stream.playlist)
                for k, v in stream.headers.items():
                    print(f"  {k}: {v}", file=sys.stderr)
        elif args.command == "library":
            _print([a.to_dict() for a in WatchStore().library])
        elif args.command == "history":
            _print([h.to_dict() for h in WatchStore().history])
    except ResolveError as e:
        print(f"{e.kind}: {e}", file=sys.stderr)
        return 1
    except CatalogError as e:
        print(f"CatalogError: {e}", file=sys.stderr)
        return 1
    finally:
        await engine.close()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kwikstream")
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("search", help="Search the catalog")
    p.add_argument("query")

    p = sub.add_parser("episodes", help="List one page of episodes")
    p.add_argument("session", help="Anime session id")
    p.add_argument("--page", type=int, default=1)

    p = sub.add_parser("streams", help="List mirrors for an episode")
    p.add_argument("series", help="Anime session id")
    p.add_argument("episode", help="Episode session id")

    p = sub.add_parser("resolve", help="Resolve a kwik hosting page to an m3u8 URL")
    p.add_argument("url")
    p.add_argument("--json", action="store_true", help="Print playlist and headers as JSON")

    sub.add_parser("library", help="Show the saved library")
    sub.add_parser("history", help="Show watch history")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config.setup_logging(args.log_level)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
