"""Body materializer: turns the decoded response stream into the requested type."""
from __future__ import annotations

import json
from typing import Any, AsyncIterator, Awaitable, Callable, Mapping, Optional, Sequence

from loguru import logger

from ferryhttp.constants import ReturnType
from ferryhttp.domain.errors import ValidationFailed

Closer = Callable[[], Awaitable[None]]


async def drain(stream: AsyncIterator[bytes]) -> None:
    async for _ in stream:
        pass


async def read_all(stream: AsyncIterator[bytes]) -> bytes:
    return b"".join([chunk async for chunk in stream])


def parse_json(text: str, validator: Optional[Callable[[Any], Any]]) -> Any:
    """Parse a JSON body.

    Without a validator a body that is not JSON comes back as text. With one,
    both a parse failure and a falsy verdict raise ValidationFailed.
    """
    try:
        parsed = json.loads(text)
    except ValueError:
        if validator is not None:
            raise ValidationFailed() from None
        return text
    if validator is not None and not validator(parsed):
        raise ValidationFailed()
    return parsed


async def materialize(
    return_type: ReturnType,
    raw_stream: AsyncIterator[bytes],
    decoded_stream: AsyncIterator[bytes],
    validator: Optional[Callable[[Any], Any]] = None,
) -> Any:
    """Consume the body for every return type except ``stream``."""
    if return_type is ReturnType.EMPTY:
        await drain(raw_stream)
        return None
    data = await read_all(decoded_stream)
    if return_type is ReturnType.BUFFER:
        return data
    text = data.decode("utf-8", errors="replace")
    if return_type is ReturnType.JSON:
        return parse_json(text, validator)
    return text


class ResponseStream:
    """Decoded response body handed to the caller for incremental reading.

    The stream owns the final hop's response and the call's transport; both
    are released on exhaustion or error when ``auto_close`` is set, and always
    on :meth:`aclose`. Errors raised while reading surface here, to the
    consumer, not to the call that produced the Result.
    """

    def __init__(
        self,
        decoded: AsyncIterator[bytes],
        closers: Sequence[Closer] = (),
        transformer_options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        options = dict(transformer_options or {})
        self._decoded = decoded
        self._closers = list(closers)
        self._chunk_size: Optional[int] = options.get("chunk_size")
        self._auto_close = bool(options.get("auto_close", True))
        self._buffer = b""
        self._exhausted = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "ResponseStream":
        return self

    async def __anext__(self) -> bytes:
        if self._closed:
            raise StopAsyncIteration
        try:
            chunk = await self._next_chunk()
        except BaseException:
            # End of body and read errors alike
            if self._auto_close:
                await self.aclose()
            raise
        return chunk

    async def _next_chunk(self) -> bytes:
        if not self._chunk_size:
            return await self._decoded.__anext__()
        while not self._exhausted and len(self._buffer) < self._chunk_size:
            try:
                self._buffer += await self._decoded.__anext__()
            except StopAsyncIteration:
                self._exhausted = True
        if not self._buffer:
            raise StopAsyncIteration
        chunk, self._buffer = self._buffer[: self._chunk_size], self._buffer[self._chunk_size :]
        return chunk

    async def read(self) -> bytes:
        """Read the remainder of the body."""
        return b"".join([chunk async for chunk in self])

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        aclose_decoded = getattr(self._decoded, "aclose", None)
        if aclose_decoded is not None:
            try:
                await aclose_decoded()
            except Exception as exc:
                logger.warning("response stream close failed: {}", exc)
        for closer in self._closers:
            try:
                await closer()
            except Exception as exc:
                logger.warning("response resource close failed: {}", exc)

    async def __aenter__(self) -> "ResponseStream":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
