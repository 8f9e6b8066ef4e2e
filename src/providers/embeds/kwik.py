"""
Kwik embed scraper.

Two pages, two decode stages:
  /f/<slug>  custom cipher → `var url = '/e/<id>'`
  /e/<id>    custom cipher and/or p,a,c,k,e,d → https://….m3u8
"""
from __future__ import annotations
import logging
from urllib.parse import urlparse

from ..base import (
    Applied, EmbedResult, ExtractedReference, Invalid, MalformedCipherParameters,
    NoEmbedPath, NoStreamUrl, RelativePath, Stream, StreamUrl,
)
from ..fetcher import Fetcher
from ..runner import register_embed
from .. import cipher, extractor, unpacker
from ...core import config

log = logging.getLogger("kwikstream.providers")


# a cipher layer may wrap another obfuscated layer
MAX_LAYERS = 3


def _cipher_layers(html: str) -> tuple[list[str], str | None]:
    """Peel nested cipher layers, outermost first. Returns (texts, invalid reason)."""
    texts = []
    text = html
    for _ in range(MAX_LAYERS):
        outcome = cipher.unpack(text)
        if isinstance(outcome, Invalid):
            return texts, outcome.reason
        if not isinstance(outcome, Applied):
            break
        text = outcome.text
        texts.append(text)
    return texts, None


def decode_entry_page(html: str, origin: str) -> ExtractedReference:
    layers, invalid = _cipher_layers(html)
    for text in layers:
        ref = extractor.extract(text, RelativePath)
        # some entry pages already carry the manifest
        ref = ref or extractor.extract(text, StreamUrl)
        if ref:
            return ref

    path = extractor.find_literal_embed_path(html, origin)
    if path:
        return RelativePath(path)
    if invalid:
        raise MalformedCipherParameters(f"entry page: {invalid}")
    raise NoEmbedPath("Could not find embed URL in kwik entry page")


def decode_embed_page(html: str) -> str:
    layers, invalid = _cipher_layers(html)
    for text in layers:
        url = extractor.find_stream_url(text) or unpacker.find_stream_url(text)
        if url:
            return url
        log.debug("Cipher layer decoded without a manifest URL")

    url = unpacker.find_stream_url(html)
    if url:
        return url
    if invalid:
        raise MalformedCipherParameters(f"embed page: {invalid}")
    raise NoStreamUrl("Could not find m3u8 URL in kwik embed page")


@register_embed
class KwikEmbed:
    id = "kwik"
    name = "Kwik"
    rank = 100

    def __init__(self, origin: str | None = None):
        self.origin = (origin or config.KWIK_ORIGIN).rstrip("/")

    def handles(self, url: str) -> bool:
        return urlparse(url).netloc == urlparse(self.origin).netloc

    async def scrape(self, url: str, fetcher: Fetcher) -> EmbedResult:
        entry_html = await fetcher.get(url, referer=f"{self.origin}/")
        ref = decode_entry_page(entry_html, self.origin)

        if isinstance(ref, StreamUrl):
            playlist = ref.url
        else:
            embed_url = f"{self.origin}{ref.path}"
            log.info(f"[{self.id}] Entry page → {ref.path}")
            embed_html = await fetcher.get(embed_url, referer=url)
            playlist = decode_embed_page(embed_html)

        log.info(f"[{self.id}] Stream resolved")
        return EmbedResult(streams=[
            Stream(playlist=playlist, headers={"Referer": f"{self.origin}/"})
        ])
