"""
Core types for the kwikstream resolver.

Decoders report a tagged outcome:
  - Applied: the obfuscation block was found and reversed
  - NotApplicable: the page does not use this scheme (not an error)
  - Invalid: the block was found but its parameters are broken
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Union

# ──────────────────────────────
#  Decoder parameters
# ──────────────────────────────
@dataclass(frozen=True)
class CipherParameters:
    ciphertext: str
    charset: str
    offset: int
    radix: int                        # index into charset, also the numeral base

    @property
    def separator(self) -> str:
        return self.charset[self.radix]


@dataclass(frozen=True)
class PackerParameters:
    packed_source: str
    base: int                         # 2..62
    keyword_count: int                # informational only
    dictionary: list[str]
    separator: str = "|"

    @classmethod
    def from_raw(cls, packed: str, base: int, count: int, keywords: str, separator: str):
        return cls(packed, base, count, keywords.split(separator), separator)

# ──────────────────────────────
#  Decode outcomes
# ──────────────────────────────
@dataclass(frozen=True)
class Applied:
    text: str


@dataclass(frozen=True)
class NotApplicable:
    pass


@dataclass(frozen=True)
class Invalid:
    reason: str


DecodeOutcome = Union[Applied, NotApplicable, Invalid]

# ──────────────────────────────
#  Extracted references
# ──────────────────────────────
@dataclass(frozen=True)
class RelativePath:
    path: str                         # e.g. "/e/abc123"


@dataclass(frozen=True)
class StreamUrl:
    url: str                          # absolute .m3u8 address


ExtractedReference = Union[RelativePath, StreamUrl]

# ──────────────────────────────
#  Stream definitions
# ──────────────────────────────
@dataclass
class Stream:
    playlist: str                     # m3u8 URL
    headers: dict[str, str] = field(default_factory=dict)

    def to_dict(self):
        d = {"type": "hls", "playlist": self.playlist}
        if self.headers:
            d["headers"] = self.headers
        return d


@dataclass
class EmbedResult:
    streams: list[Stream] = field(default_factory=list)

# ──────────────────────────────
#  Catalog records
# ──────────────────────────────
@dataclass
class Anime:
    id: int
    title: str
    session: str
    status: str = ""
    episodes: Optional[int] = None
    score: Optional[float] = None
    year: Optional[int] = None
    anime_type: Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict) -> "Anime":
        return cls(
            id=d["id"], title=d["title"], session=d["session"],
            status=d.get("status") or "",
            episodes=d.get("episodes"), score=d.get("score"),
            year=d.get("year"), anime_type=d.get("type"),
        )

    def to_dict(self):
        return {
            "id": self.id, "title": self.title, "session": self.session,
            "status": self.status, "episodes": self.episodes,
            "score": self.score, "year": self.year, "type": self.anime_type,
        }


@dataclass
class Episode:
    episode: str
    session: str
    snapshot: str = ""

    def to_dict(self):
        return {"episode": self.episode, "session": self.session, "snapshot": self.snapshot}


@dataclass
class StreamItem:
    link: str                         # kwik hosting page
    name: str                         # e.g. "SubsPlease · 1080p"

    def to_dict(self):
        return {"link": self.link, "name": self.name}


@dataclass
class SearchPage:
    data: list[Anime] = field(default_factory=list)
    current_page: int = 1
    last_page: int = 1


@dataclass
class EpisodePage:
    title: str
    episodes: list[Episode] = field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    next: bool = False

# ──────────────────────────────
#  Errors
# ──────────────────────────────
class ResolveError(Exception):
    kind = "ResolveError"


class FetchFailed(ResolveError):
    kind = "FetchFailed"


class MalformedCipherParameters(ResolveError):
    kind = "MalformedCipherParameters"


class NoEmbedPath(ResolveError):
    kind = "NoEmbedPath"


class NoStreamUrl(ResolveError):
    kind = "NoStreamUrl"


class UnsupportedHost(ResolveError):
    kind = "UnsupportedHost"


class CatalogError(Exception):
    pass
