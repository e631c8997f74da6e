"""Socket-level transport using an httpcore connection pool.

httpcore neither follows redirects nor decodes bodies, and it sends exactly the
headers it is given, so this transport computes ``Host`` and the body framing
header itself.
"""
from __future__ import annotations

from typing import Any, Mapping

import httpcore
import httpx

from ferryhttp.constants import CONTENT_LENGTH, HOST, TRANSFER_ENCODING
from ferryhttp.domain.headers import has_header
from ferryhttp.domain.models import RequestPayload
from ferryhttp.domain.request_body import is_streaming
from ferryhttp.ports.transport import Transport, TransportResponse


def host_header(url: httpx.URL) -> str:
    # netloc is IDNA encoded, brackets IPv6 hosts and omits default ports
    return url.netloc.decode("ascii")


def build_request_headers(
    url: httpx.URL,
    headers: Mapping[str, str],
    payload: RequestPayload,
) -> list[tuple[str, str]]:
    request_headers = [(k, v) for k, v in headers.items()]
    if not has_header(headers, HOST):
        request_headers.insert(0, (HOST, host_header(url)))
    if has_header(headers, CONTENT_LENGTH) or has_header(headers, TRANSFER_ENCODING):
        return request_headers
    if is_streaming(payload):
        request_headers.append((TRANSFER_ENCODING, "chunked"))
    elif payload is not None:
        request_headers.append((CONTENT_LENGTH, str(len(payload))))
    return request_headers


class SocketTransport(Transport):
    """Transport implementation over ``httpcore.AsyncConnectionPool``.

    ``agent`` is any object with httpcore's ``handle_async_request`` interface;
    it is used as is and never closed here. Without one, a pool is created for
    the call and closed by :meth:`aclose`.
    """

    def __init__(self, agent: Any = None) -> None:
        self._owns_pool = agent is None
        self._pool = httpcore.AsyncConnectionPool() if agent is None else agent

    async def execute(
        self,
        url: httpx.URL,
        method: str,
        headers: Mapping[str, str],
        payload: RequestPayload,
    ) -> TransportResponse:
        request = httpcore.Request(
            method,
            str(url),
            headers=build_request_headers(url, headers, payload),
            content=b"" if payload is None else payload,
        )
        response = await self._pool.handle_async_request(request)
        return TransportResponse(
            status_code=response.status,
            headers=httpx.Headers(response.headers),
            stream=response.aiter_stream(),
            release=response.aclose,
            request=request,
            response=response,
        )

    async def aclose(self) -> None:
        if self._owns_pool:
            await self._pool.aclose()
