"""Unit tests for Content-Encoding decoding."""
from __future__ import annotations

import gzip
import zlib

import brotli
import httpx
import pytest

from ferryhttp.application.decompression import (
    BrotliDecoder,
    DeflateDecoder,
    GzipDecoder,
    IdentityDecoder,
    build_decoders,
    decode_stream,
    decoders_for_response,
)

PAYLOAD = b"The quick brown fox jumps over the lazy dog. " * 50


async def _chunks(data: bytes, size: int = 16):
    for start in range(0, len(data), size):
        yield data[start : start + size]


async def _decode(data: bytes, content_encoding: str) -> bytes:
    decoders = build_decoders(content_encoding)
    return b"".join([chunk async for chunk in decode_stream(_chunks(data), decoders)])


def _raw_deflate(data: bytes) -> bytes:
    compressor = zlib.compressobj(wbits=-zlib.MAX_WBITS)
    return compressor.compress(data) + compressor.flush()


def test_build_decoders_runs_in_reverse_header_order():
    decoders = build_decoders("gzip, br")

    assert [type(d) for d in decoders] == [BrotliDecoder, GzipDecoder]


def test_build_decoders_is_case_insensitive_and_trims():
    decoders = build_decoders(" GZIP ,Deflate,identity")

    assert [type(d) for d in decoders] == [IdentityDecoder, DeflateDecoder, GzipDecoder]


def test_build_decoders_without_header():
    assert build_decoders(None) == []
    assert build_decoders("") == []


def test_unknown_encoding_warns_and_passes_through(log_records):
    decoders = build_decoders("compress")

    assert [type(d) for d in decoders] == [IdentityDecoder]
    assert any(
        r["level"].name == "WARNING" and "unsupported content-encoding" in r["message"] for r in log_records
    )


@pytest.mark.parametrize(
    "encoded, content_encoding",
    [
        (gzip.compress(PAYLOAD), "gzip"),
        (zlib.compress(PAYLOAD), "deflate"),
        (_raw_deflate(PAYLOAD), "deflate"),
        (brotli.compress(PAYLOAD), "br"),
        (PAYLOAD, "identity"),
        (brotli.compress(gzip.compress(PAYLOAD)), "gzip, br"),
        (gzip.compress(zlib.compress(PAYLOAD)), "deflate, gzip"),
    ],
)
async def test_decode_stream(encoded, content_encoding):
    assert await _decode(encoded, content_encoding) == PAYLOAD


async def test_decode_stream_without_decoders_skips_empty_chunks():
    async def chunks():
        yield b"a"
        yield b""
        yield b"b"

    assert [chunk async for chunk in decode_stream(chunks(), [])] == [b"a", b"b"]


async def test_corrupt_gzip_raises_decoder_error():
    with pytest.raises(zlib.error):
        await _decode(b"this is not gzip at all", "gzip")


TRUNCATED_BODY = b"abcdefghij" * 1000


@pytest.mark.parametrize(
    "encoded, content_encoding",
    [
        (gzip.compress(TRUNCATED_BODY)[:-8], "gzip"),
        (zlib.compress(TRUNCATED_BODY)[:-4], "deflate"),
    ],
)
async def test_truncated_zlib_stream_raises(encoded, content_encoding):
    with pytest.raises(zlib.error, match="unexpected end"):
        await _decode(encoded, content_encoding)


async def test_truncated_brotli_stream_raises():
    with pytest.raises(brotli.error):
        await _decode(brotli.compress(TRUNCATED_BODY)[:-8], "br")


def test_flush_without_input_is_accepted():
    for decoder in (GzipDecoder(), DeflateDecoder(), BrotliDecoder()):
        assert decoder.flush() == b""


def test_no_decoders_for_head_or_empty_body():
    headers = httpx.Headers({"Content-Encoding": "gzip"})

    assert decoders_for_response("HEAD", headers) == []
    assert decoders_for_response("GET", httpx.Headers({"Content-Encoding": "gzip", "Content-Length": "0"})) == []
    assert [type(d) for d in decoders_for_response("GET", headers)] == [GzipDecoder]
