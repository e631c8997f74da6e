"""Fetch-style transport using ``httpx.AsyncClient``."""
from __future__ import annotations

from typing import Mapping

import httpx

from ferryhttp.domain.models import RequestPayload
from ferryhttp.ports.transport import Transport, TransportResponse

# Hop timeouts are enforced by the redirect controller, not by httpx
_NO_TIMEOUT = httpx.Timeout(None)


class FetchTransport(Transport):
    """Transport implementation over an httpx client.

    A caller-supplied client (HTTP/2, custom transports, shared pools) is used as
    is and left open; otherwise one is created for the call and closed by
    :meth:`aclose`. Redirects are never followed by httpx and the raw, still
    encoded body is exposed.
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(follow_redirects=False, timeout=_NO_TIMEOUT)
        self._client = client

    async def execute(
        self,
        url: httpx.URL,
        method: str,
        headers: Mapping[str, str],
        payload: RequestPayload,
    ) -> TransportResponse:
        request = self._client.build_request(
            method,
            url,
            headers=dict(headers),
            content=payload,
            timeout=_NO_TIMEOUT,
        )
        response = await self._client.send(request, stream=True, follow_redirects=False)
        return TransportResponse(
            status_code=response.status_code,
            headers=response.headers,
            stream=response.aiter_raw(),
            release=response.aclose,
            request=request,
            response=response,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
