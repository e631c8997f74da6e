"""Transport port: one network exchange (a hop) behind a single contract.

The pipeline depends on this port only; the socket-level (httpcore) and
fetch-style (httpx) implementations live in infrastructure.
"""
from __future__ import annotations

from typing import Any, AsyncIterator, Awaitable, Callable, Mapping, Protocol, runtime_checkable

import httpx

from ferryhttp.domain.models import RequestPayload


class TransportResponse:
    """Response headers of one hop plus its still unread, undecoded body stream."""

    def __init__(
        self,
        status_code: int,
        headers: httpx.Headers,
        stream: AsyncIterator[bytes],
        *,
        release: Callable[[], Awaitable[None]],
        request: Any = None,
        response: Any = None,
    ) -> None:
        self.status_code = status_code
        self.headers = headers
        self.stream = stream
        self.request = request
        self.response = response
        self._release = release
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        """Release the hop's connection; safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._release()


@runtime_checkable
class Transport(Protocol):
    """Port: perform one HTTP exchange without following redirects or decoding."""

    async def execute(
        self,
        url: httpx.URL,
        method: str,
        headers: Mapping[str, str],
        payload: RequestPayload,
    ) -> TransportResponse:
        """Send the request and return once response headers have arrived.

        Cancelling the awaiting task aborts the exchange.
        """
        ...

    async def aclose(self) -> None:
        """Release resources owned by the transport. No-op when it owns nothing."""
        ...
