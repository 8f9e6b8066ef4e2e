import pytest

from src.providers.base import FetchFailed
from src.providers.unpacker import ALPHABET

CHARSET = "DyxkNBzcrHqT"


def base_encode(val: int, base: int) -> str:
    """Encode `val` in the given base (up to 62)."""
    if val < base:
        return ALPHABET[val]
    return base_encode(val // base, base) + ALPHABET[val % base]


def cipher_encode(data: bytes, charset: str, offset: int, radix: int) -> str:
    """Forward scheme of the kwik cipher: one base-`radix` numeral per byte."""
    sep = charset[radix]
    out = []
    for b in data:
        v = b + offset
        digits = ""
        while True:
            digits = charset[v % radix] + digits
            v //= radix
            if v == 0:
                break
        out.append(digits)
    return sep.join(out) + sep


def cipher_page(text: str, charset: str = CHARSET, offset: int = 9, radix: int = 7) -> str:
    ct = cipher_encode(text.encode("utf-8"), charset, offset, radix)
    return (
        '<html><body><script>eval(function(h,u,n,t,e,r){r="";for(var i=0,len=h.length;i<len;i++)'
        '{var s="";while(h[i]!==n[e]){s+=h[i];i++}r+=String.fromCharCode(s)}'
        'return decodeURIComponent(escape(r))}'
        f'("{ct}",19,"{charset}",{offset},{radix},32))</script></body></html>'
    )


def packer_call(packed: str, keywords: list[str], base: int = 62, sep: str = "|") -> str:
    return (
        "eval(function(p,a,c,k,e,d){e=function(c){return c.toString(36)};"
        "while(c--)if(k[c])p=p.replace(new RegExp('\\\\b'+e(c)+'\\\\b','g'),k[c]);return p}"
        f"('{packed}',{base},{len(keywords)},'{'|'.join(keywords)}'.split('{sep}'),0,{{}}))"
    )


def pack(words: list[str], template: str) -> tuple[str, list[str]]:
    """Replace `{i}` in template with the base-62 numeral of i; returns (packed, keywords)."""
    packed = template.format(*[base_encode(i, 62) for i in range(len(words))])
    return packed, words


class FakeFetcher:
    def __init__(self, pages: dict):
        self.pages = pages
        self.calls = []

    async def get(self, url, *, referer=None, headers=None, params=None):
        self.calls.append((url, referer))
        if url not in self.pages:
            raise FetchFailed(f"GET {url} returned HTTP 404")
        return self.pages[url]

    async def close(self):
        pass


@pytest.fixture
def fake_fetcher():
    return FakeFetcher
