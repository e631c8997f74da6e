"""Transport factory: picks the transport for one call from its merged options."""
from __future__ import annotations

import importlib.util

import httpx

from ferryhttp.domain.errors import InvalidParam
from ferryhttp.domain.options import RequestOptions
from ferryhttp.infrastructure.http.fetch_transport import FetchTransport
from ferryhttp.infrastructure.http.socket_transport import SocketTransport
from ferryhttp.ports.transport import Transport


def fetch_available() -> bool:
    return importlib.util.find_spec("httpx") is not None


def create_transport(options: RequestOptions) -> Transport:
    """Evaluated once per call; every hop of the call shares the transport.

    ``fetch=False`` -> socket-level transport over ``options.agent``
    ``fetch=True``  -> fetch-style transport with a client of its own
    ``fetch=<httpx.AsyncClient>`` -> fetch-style transport over that client
    """
    fetch = options.fetch
    if isinstance(fetch, httpx.AsyncClient):
        return FetchTransport(fetch)
    if fetch:
        if not fetch_available():
            raise InvalidParam("fetch")
        return FetchTransport()
    return SocketTransport(options.agent)
