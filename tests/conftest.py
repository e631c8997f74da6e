from __future__ import annotations

import asyncio
import gzip
import zlib
from typing import Any, AsyncIterator

import brotli
import httpcore
import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from loguru import logger

from ferryhttp.application.plugins import registry
from ferryhttp.config.defaults import reset_default_options

from tests.test_data import HELLO


def _encoded(content: bytes, encoding: str) -> Response:
    return Response(content=content, headers={"Content-Encoding": encoding}, media_type="text/plain")


def _redirect(status_code: int, location: str | None) -> Response:
    headers = {"Location": location} if location is not None else {}
    return Response(status_code=status_code, headers=headers)


def raw_deflate(data: bytes) -> bytes:
    compressor = zlib.compressobj(wbits=-zlib.MAX_WBITS)
    return compressor.compress(data) + compressor.flush()


def create_mock_app() -> FastAPI:
    app = FastAPI()

    @app.api_route("/hello", methods=["GET", "HEAD", "POST", "PUT", "DELETE", "OPTIONS", "TRACE", "PATCH"])
    async def hello() -> PlainTextResponse:
        return PlainTextResponse(HELLO)

    @app.get("/json")
    async def json_body() -> JSONResponse:
        return JSONResponse({"ok": True, "items": [1, 2, 3]})

    @app.get("/json-false")
    async def json_false() -> JSONResponse:
        return JSONResponse({"ok": False})

    @app.get("/not-json")
    async def not_json() -> PlainTextResponse:
        return PlainTextResponse("definitely not json")

    @app.get("/invalid-utf8")
    async def invalid_utf8() -> Response:
        return Response(content=b"ok \xff\xfe done", media_type="text/plain")

    @app.api_route("/inspect", methods=["GET", "HEAD", "POST", "PUT", "DELETE", "OPTIONS", "TRACE", "PATCH"])
    async def inspect(request: Request) -> JSONResponse:
        body = await request.body()
        return JSONResponse(
            {
                "method": request.method,
                "body": body.decode("utf-8"),
                "headers": dict(request.headers),
                "url": str(request.url),
            }
        )

    @app.get("/gzip")
    async def gzip_body() -> Response:
        return _encoded(gzip.compress(HELLO.encode()), "gzip")

    @app.get("/deflate")
    async def deflate_body() -> Response:
        return _encoded(zlib.compress(HELLO.encode()), "deflate")

    @app.get("/deflate-raw")
    async def deflate_raw_body() -> Response:
        return _encoded(raw_deflate(HELLO.encode()), "deflate")

    @app.get("/br")
    async def br_body() -> Response:
        return _encoded(brotli.compress(HELLO.encode()), "br")

    @app.get("/stacked")
    async def stacked_body() -> Response:
        # gzip applied first, then br
        return _encoded(brotli.compress(gzip.compress(HELLO.encode())), "gzip, br")

    @app.get("/unknown-encoding")
    async def unknown_encoding() -> Response:
        return _encoded(HELLO.encode(), "x-custom")

    @app.get("/gzip-json")
    async def gzip_json() -> Response:
        return Response(
            content=gzip.compress(b'{"compressed": true}'),
            headers={"Content-Encoding": "gzip"},
            media_type="application/json",
        )

    @app.api_route("/redirect/{status_code}", methods=["GET", "POST", "PUT"])
    async def redirect(status_code: int, to: str = "/hello") -> Response:
        return _redirect(status_code, to)

    @app.get("/chain/{remaining}")
    async def chain(remaining: int) -> Response:
        if remaining <= 0:
            return PlainTextResponse("done")
        return _redirect(302, f"/chain/{remaining - 1}")

    @app.get("/no-location")
    async def no_location() -> Response:
        return _redirect(302, None)

    @app.get("/cross-origin")
    async def cross_origin() -> Response:
        return _redirect(302, "http://other.test/inspect")

    @app.get("/same-origin")
    async def same_origin() -> Response:
        return _redirect(301, "/inspect")

    @app.post("/submit")
    async def submit() -> Response:
        return _redirect(303, "/inspect")

    @app.post("/submit-elsewhere")
    async def submit_elsewhere() -> Response:
        return _redirect(307, "http://other.test/inspect")

    @app.get("/slow")
    async def slow() -> PlainTextResponse:
        await asyncio.sleep(5)
        return PlainTextResponse("too late")

    @app.get("/large")
    async def large() -> PlainTextResponse:
        return PlainTextResponse("abcdefghij" * 100)

    return app


class TrackingStream:
    """httpcore response body that records whether it was closed."""

    def __init__(self, body: bytes, chunk_size: int = 7) -> None:
        self._body = body
        self._chunk_size = chunk_size
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for start in range(0, len(self._body), self._chunk_size):
            yield self._body[start : start + self._chunk_size]

    async def aclose(self) -> None:
        self.closed = True


def _to_httpx_url(url: httpcore.URL) -> str:
    scheme = url.scheme.decode("ascii")
    host = url.host.decode("ascii")
    netloc = host if url.port is None else f"{host}:{url.port}"
    return f"{scheme}://{netloc}{url.target.decode('ascii')}"


class AsgiAgent:
    """Connection agent with httpcore's interface, answered in process by an ASGI app.

    Stands in for an ``httpcore.AsyncConnectionPool`` so the socket-level
    transport can be exercised without opening sockets.
    """

    def __init__(self, app: FastAPI) -> None:
        self._transport = httpx.ASGITransport(app=app)
        self.requests: list[httpcore.Request] = []
        self.request_bodies: list[bytes] = []
        self.streams: list[TrackingStream] = []
        self.closed = False

    async def handle_async_request(self, request: httpcore.Request) -> httpcore.Response:
        self.requests.append(request)
        content = b"".join([chunk async for chunk in request.stream])
        self.request_bodies.append(content)
        headers = [(k, v) for k, v in request.headers if k.lower() != b"transfer-encoding"]
        asgi_request = httpx.Request(
            request.method.decode("ascii"),
            _to_httpx_url(request.url),
            headers=headers,
            content=content,
        )
        asgi_response = await self._transport.handle_async_request(asgi_request)
        body = b"".join([chunk async for chunk in asgi_response.stream])
        stream = TrackingStream(body)
        self.streams.append(stream)
        return httpcore.Response(asgi_response.status_code, headers=asgi_response.headers.raw, content=stream)

    async def aclose(self) -> None:
        self.closed = True

    def sent_headers(self, index: int = -1) -> dict[str, str]:
        return {k.decode().lower(): v.decode() for k, v in self.requests[index].headers}


class SlowAgent:
    """Agent whose exchange never completes; records that it was cancelled."""

    def __init__(self) -> None:
        self.cancelled = False

    async def handle_async_request(self, request: httpcore.Request) -> httpcore.Response:
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        raise AssertionError("unreachable")


@pytest.fixture()
def mock_app() -> FastAPI:
    return create_mock_app()


@pytest.fixture()
def agent(mock_app: FastAPI) -> AsgiAgent:
    return AsgiAgent(mock_app)


@pytest.fixture()
async def fetch_client(mock_app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.ASGITransport(app=mock_app), follow_redirects=False)
    yield client
    await client.aclose()


@pytest.fixture(params=["socket", "fetch"])
def transport_options(request: Any, agent: AsgiAgent, fetch_client: httpx.AsyncClient) -> dict[str, Any]:
    """Per-call options routing the request to the mock app over either transport."""
    if request.param == "socket":
        return {"agent": agent}
    return {"fetch": fetch_client}


@pytest.fixture()
def log_records() -> Any:
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture(autouse=True)
def _isolate_process_state() -> Any:
    reset_default_options()
    registry.clear()
    yield
    reset_default_options()
    registry.clear()
