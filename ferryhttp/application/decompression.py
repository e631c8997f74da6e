"""Content-Encoding decoding for response streams.

Encodings listed in ``Content-Encoding`` were applied in order, so they are
undone in reverse. Each decoder is incremental: ``decode`` takes the next
compressed chunk and ``flush`` returns whatever is still buffered at end of
stream.
"""
from __future__ import annotations

import zlib
from typing import AsyncIterator, Mapping, Optional, Protocol

import brotli
from loguru import logger

from ferryhttp.constants import CONTENT_ENCODING, CONTENT_LENGTH, HttpMethod


class Decoder(Protocol):
    def decode(self, data: bytes) -> bytes: ...

    def flush(self) -> bytes: ...


class IdentityDecoder:
    def decode(self, data: bytes) -> bytes:
        return data

    def flush(self) -> bytes:
        return b""


class GzipDecoder:
    def __init__(self) -> None:
        self._decompressor = zlib.decompressobj(16 + zlib.MAX_WBITS)
        self._fed = False

    def decode(self, data: bytes) -> bytes:
        self._fed = True
        return self._decompressor.decompress(data)

    def flush(self) -> bytes:
        data = self._decompressor.flush()
        if self._fed and not self._decompressor.eof:
            raise zlib.error("unexpected end of compressed stream")
        return data


class DeflateDecoder:
    """zlib-wrapped deflate, falling back to raw deflate.

    Some servers send raw deflate data under ``Content-Encoding: deflate``;
    the format is detected from the first chunk.
    """

    def __init__(self) -> None:
        self._decompressor = zlib.decompressobj()
        self._first_attempt = True

    def decode(self, data: bytes) -> bytes:
        if not self._first_attempt:
            return self._decompressor.decompress(data)
        self._first_attempt = False
        try:
            return self._decompressor.decompress(data)
        except zlib.error:
            self._decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
            return self._decompressor.decompress(data)

    def flush(self) -> bytes:
        data = self._decompressor.flush()
        if not self._first_attempt and not self._decompressor.eof:
            raise zlib.error("unexpected end of compressed stream")
        return data


class BrotliDecoder:
    def __init__(self) -> None:
        self._decompressor = brotli.Decompressor()
        self._fed = False

    def decode(self, data: bytes) -> bytes:
        if not data:
            return b""
        self._fed = True
        return self._decompressor.process(data)

    def flush(self) -> bytes:
        if self._fed and not self._decompressor.is_finished():
            raise brotli.error("unexpected end of compressed stream")
        return b""


_DECODERS = {
    "identity": IdentityDecoder,
    "gzip": GzipDecoder,
    "x-gzip": GzipDecoder,
    "deflate": DeflateDecoder,
    "br": BrotliDecoder,
}


def build_decoders(content_encoding: Optional[str]) -> list[Decoder]:
    """Decoders for a Content-Encoding value, in the order they must run."""
    if not content_encoding:
        return []
    decoders: list[Decoder] = []
    for token in content_encoding.split(","):
        token = token.strip().lower()
        if not token:
            continue
        decoder_cls = _DECODERS.get(token)
        if decoder_cls is None:
            logger.warning("unsupported content-encoding: {}", token)
            decoder_cls = IdentityDecoder
        decoders.append(decoder_cls())
    decoders.reverse()
    return decoders


def decoders_for_response(method: str, headers: Mapping[str, str]) -> list[Decoder]:
    # No body to decode; zlib would fail on an empty gzip stream
    if method == HttpMethod.HEAD or headers.get(CONTENT_LENGTH) == "0":
        return []
    return build_decoders(headers.get(CONTENT_ENCODING))


def _run(decoders: list[Decoder], data: bytes, start: int = 0) -> bytes:
    for decoder in decoders[start:]:
        if not data:
            break
        data = decoder.decode(data)
    return data


async def decode_stream(stream: AsyncIterator[bytes], decoders: list[Decoder]) -> AsyncIterator[bytes]:
    if not decoders:
        async for chunk in stream:
            if chunk:
                yield chunk
        return

    async for chunk in stream:
        data = _run(decoders, chunk)
        if data:
            yield data

    # Whatever stage i still buffers has to pass through stages i+1..n
    for index, decoder in enumerate(decoders):
        data = _run(decoders, decoder.flush(), index + 1)
        if data:
            yield data
