"""
Invocation shapes observed on kwik pages.

The host changes its obfuscation from time to time. Every pattern that
depends on the current shape lives here; the decoders only see the
captured arguments.
"""
from __future__ import annotations
import re
from functools import lru_cache
from typing import Iterator, NamedTuple, Optional

# eval(function(a,b,c,d,e,f){...}("<cipher>", 19, "<charset>", 9, 2, 32))
CIPHER_CALL_RE = re.compile(
    r'eval\(function\(\w+,\w+,\w+,\w+,\w+,\w+\)\{.*?\}\('
    r'"(?P<cipher>[^"]+)",\s*(?P<n1>\d+),\s*"(?P<charset>[^"]+)",\s*'
    r'(?P<offset>[^,\s)]+),\s*(?P<radix>[^,\s)]+),\s*(?P<n2>\d+)\)\)',
    re.DOTALL,
)

# eval(function(p,a,c,k,e,d){...}('<packed>',62,120,'a|b|c'.split('|'),0,{}))
PACKER_CALL_RE = re.compile(
    r"eval\(function\(p,a,c,k,e,[dr]\)\{.*?\}\("
    r"'(?P<packed>.*?)',(?P<base>\d+),(?P<count>\d+),'(?P<keywords>.*?)'"
    r"\.split\('(?P<sep>\\?[^'])'\)",
    re.DOTALL,
)

# var url = '/e/abc123';
EMBED_PATH_RE = re.compile(r"""\burl\s*=\s*(['"])(?P<path>/e/[^'"]+)\1""")

STREAM_URL_RE = re.compile(r"""https?://[^'"\s]+\.m3u8""")


class CipherCall(NamedTuple):
    ciphertext: str
    charset: str
    offset: str
    radix: str


class PackerCall(NamedTuple):
    packed: str
    base: str
    count: str
    keywords: str
    separator: str


def find_cipher_call(text: str) -> Optional[CipherCall]:
    m = CIPHER_CALL_RE.search(text)
    if not m:
        return None
    return CipherCall(m.group("cipher"), m.group("charset"), m.group("offset"), m.group("radix"))


def iter_packer_calls(text: str) -> Iterator[PackerCall]:
    for m in PACKER_CALL_RE.finditer(text):
        # '\|' in the JS source is just '|'
        sep = m.group("sep")[-1]
        yield PackerCall(m.group("packed"), m.group("base"), m.group("count"), m.group("keywords"), sep)


@lru_cache(maxsize=8)
def literal_embed_re(origin: str) -> re.Pattern:
    """`<origin>/e/<id>` as it appears in raw entry-page HTML."""
    return re.compile(re.escape(origin) + r"(?P<path>/e/[a-zA-Z0-9]+)")
