"""
JavaScript p,a,c,k,e,d unpacker.

Kwik embed pages wrap the player setup in Dean Edwards' JS packer:
  eval(function(p,a,c,k,e,d){...}('0 1=\'2\'',62,3,'var|source|...'.split('|'),0,{}))

Every word token of the payload that reads as a base-`a` numeral is an
index into the keyword list.
"""
from __future__ import annotations
import re
import logging
from typing import Iterator, Optional

from .base import PackerParameters
from . import extractor, shapes

log = logging.getLogger("kwikstream.providers")

ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
_DIGITS = {ch: i for i, ch in enumerate(ALPHABET)}
_WORD_RE = re.compile(r"\w+")


def parse_base(word: str, base: int) -> Optional[int]:
    """Decode `word` as a base-`base` numeral, or None if it isn't one."""
    val = 0
    for ch in word:
        digit = _DIGITS.get(ch)
        if digit is None or digit >= base:
            return None
        val = val * base + digit
    return val


def unpack_params(params: PackerParameters) -> str:
    symtab = params.dictionary

    def _replacer(m: re.Match) -> str:
        word = m.group(0)
        idx = parse_base(word, params.base)
        if idx is None:
            return word
        return symtab[idx] if idx < len(symtab) and symtab[idx] else word

    return _WORD_RE.sub(_replacer, params.packed_source)


def iter_params(text: str) -> Iterator[PackerParameters]:
    """Packer invocations in document order, skipping ones with an unusable base."""
    for call in shapes.iter_packer_calls(text):
        base = int(call.base)
        if not 2 <= base <= 62:
            log.debug(f"Skipping packed block with base {base}")
            continue
        yield PackerParameters.from_raw(call.packed, base, int(call.count), call.keywords, call.separator)


def detect(text: str) -> bool:
    """Check if text contains packed JS."""
    return shapes.PACKER_CALL_RE.search(text) is not None


def find_stream_url(text: str) -> Optional[str]:
    """Unpack each block in order; the first one exposing a manifest URL wins."""
    for i, params in enumerate(iter_params(text)):
        url = extractor.find_stream_url(unpack_params(params))
        if url:
            log.debug(f"Packed block #{i} yielded a stream URL")
            return url
    return None
