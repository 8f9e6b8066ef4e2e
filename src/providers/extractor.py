"""Locate embed paths and manifest URLs in decoded (or raw) page text."""
from __future__ import annotations
from typing import Optional

from .base import ExtractedReference, RelativePath, StreamUrl
from . import shapes


def find_embed_path(text: str) -> Optional[str]:
    m = shapes.EMBED_PATH_RE.search(text)
    return m.group("path") if m else None


def find_stream_url(text: str) -> Optional[str]:
    m = shapes.STREAM_URL_RE.search(text)
    return m.group(0) if m else None


def find_literal_embed_path(html: str, origin: str) -> Optional[str]:
    """Fallback for entry pages that carry the embed link in plain HTML."""
    m = shapes.literal_embed_re(origin).search(html)
    return m.group("path") if m else None


def extract(text: str, mode: type[ExtractedReference]) -> Optional[ExtractedReference]:
    if mode is RelativePath:
        path = find_embed_path(text)
        return RelativePath(path) if path else None
    if mode is StreamUrl:
        url = find_stream_url(text)
        return StreamUrl(url) if url else None
    raise TypeError(f"unknown extraction mode {mode!r}")
