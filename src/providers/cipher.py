"""
Decoder for kwik's custom substitution cipher.

The page ships something like:
  eval(function(h,u,n,t,e,r){...}("DDxDyD...", 19, "DyxkNBzcr", 9, 2, 32))

The ciphertext is split on charset[radix]; each segment is a base-`radix`
numeral written with charset characters, minus `offset` it gives one byte.
The bytes are the UTF-8 of the hidden script.
"""
from __future__ import annotations
from typing import Optional

from .base import Applied, CipherParameters, DecodeOutcome, Invalid, NotApplicable
from . import shapes


def _parse_int(raw: str) -> Optional[int]:
    if not (raw.isascii() and raw.isdigit()):
        return None
    return int(raw)


def parse(call: shapes.CipherCall) -> CipherParameters | str:
    """Validate a matched call. Returns the parameters or a failure reason."""
    offset = _parse_int(call.offset)
    if offset is None:
        return f"offset {call.offset!r} is not a non-negative integer"
    radix = _parse_int(call.radix)
    if radix is None:
        return f"radix {call.radix!r} is not a non-negative integer"
    if radix >= len(call.charset):
        return f"radix {radix} out of range for charset of length {len(call.charset)}"
    return CipherParameters(call.ciphertext, call.charset, offset, radix)


def decode_bytes(params: CipherParameters) -> bytes:
    # first occurrence wins for repeated charset characters
    digits: dict[str, int] = {}
    for i, ch in enumerate(params.charset):
        digits.setdefault(ch, i)

    out = bytearray()
    for segment in params.ciphertext.split(params.separator):
        if not segment:
            continue
        value = 0
        for ch in segment:
            digit = digits.get(ch)
            if digit is None:
                continue
            value = value * params.radix + digit
        code = value - params.offset
        if 0 <= code <= 255:
            out.append(code)
    return bytes(out)


def decode(params: CipherParameters) -> str:
    return decode_bytes(params).decode("utf-8", errors="replace")


def detect(text: str) -> bool:
    """Check if text contains a cipher invocation."""
    return shapes.find_cipher_call(text) is not None


def unpack(text: str) -> DecodeOutcome:
    call = shapes.find_cipher_call(text)
    if call is None:
        return NotApplicable()
    params = parse(call)
    if isinstance(params, str):
        return Invalid(params)
    return Applied(decode(params))
