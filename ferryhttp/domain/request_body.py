"""Request body classification and serialization.

``str`` and binary bodies are sent as they are, byte streams are piped into the
transport chunk by chunk, and every other value is sent as compact JSON.
"""
from __future__ import annotations

import json
from collections.abc import AsyncIterable, Iterable, Iterator
from typing import Any, AsyncIterator

from ferryhttp.domain.models import RequestPayload

_BINARY = (bytes, bytearray, memoryview)


def is_stream_payload(body: Any) -> bool:
    if isinstance(body, AsyncIterable):
        return True
    # Generators and file objects, but not lists or tuples that should become JSON
    return isinstance(body, Iterator) or (hasattr(body, "read") and isinstance(body, Iterable))


def is_json_payload(body: Any) -> bool:
    """Whether ``body`` will be JSON-encoded on the wire."""
    return body is not None and not isinstance(body, (str, *_BINARY)) and not is_stream_payload(body)


async def _iter_async(body: AsyncIterable[Any]) -> AsyncIterator[bytes]:
    async for chunk in body:
        yield _as_bytes(chunk)


async def _iter_sync(body: Iterable[Any]) -> AsyncIterator[bytes]:
    for chunk in body:
        yield _as_bytes(chunk)


def _as_bytes(chunk: Any) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    return bytes(chunk)


def serialize_body(body: Any) -> RequestPayload:
    if body is None:
        return None
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, _BINARY):
        return bytes(body)
    if isinstance(body, AsyncIterable):
        return _iter_async(body)
    if is_stream_payload(body):
        return _iter_sync(body)
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def is_streaming(payload: RequestPayload) -> bool:
    return payload is not None and not isinstance(payload, bytes)
