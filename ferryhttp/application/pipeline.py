"""Request pipeline: one call from positional arguments to a Result.

normalize -> param hooks -> validate -> merge options -> select transport ->
redirects -> decompression -> materialize -> Result

Every failure is raised when the returned awaitable is awaited. Transport
resources are released on every exit path, except that a ``stream`` Result
hands them to its ResponseStream.
"""
from __future__ import annotations

from typing import Any, AsyncIterator, Awaitable, Mapping, Optional, Sequence

import httpx
from loguru import logger

from ferryhttp.config.defaults import BUILT_IN_OPTIONS, snapshot_default_options
from ferryhttp.constants import LOCATION, ReturnType
from ferryhttp.core import SERVICE_NAME
from ferryhttp.domain.arguments import normalize_arguments
from ferryhttp.domain.errors import InvalidParam
from ferryhttp.domain.models import RedirectState, Result
from ferryhttp.domain.options import merge_options
from ferryhttp.domain.request_body import serialize_body
from ferryhttp.domain.validation import validate_descriptor
from ferryhttp.application.decompression import decode_stream, decoders_for_response
from ferryhttp.application.materializer import ResponseStream, materialize
from ferryhttp.application.plugins import PluginRegistry, registry
from ferryhttp.application.redirects import RedirectController, SettledHop
from ferryhttp.infrastructure.http.factory import create_transport
from ferryhttp.ports.transport import Transport, TransportResponse


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def assemble_result(settled: SettledHop, body: Any) -> Result:
    response = settled.response
    headers = httpx.Headers(response.headers)
    location = headers.get(LOCATION)
    if location:
        headers[LOCATION] = str(settled.state.url.join(location))
    return Result(
        status_code=response.status_code,
        headers=headers,
        body=body,
        url=settled.state.url,
        request=response.request,
        response=response.response,
    )


async def _release(
    decoded: Optional[AsyncIterator[bytes]],
    response: Optional[TransportResponse],
    transport: Transport,
) -> None:
    if decoded is not None:
        try:
            await decoded.aclose()
        except Exception as exc:
            logger.warning("body decoder close failed: {}", exc)
    if response is not None:
        try:
            await response.aclose()
        except Exception as exc:
            logger.warning("response close failed: {}", exc)
    try:
        await transport.aclose()
    except Exception as exc:
        logger.warning("transport close failed: {}", exc)


class RequestPipeline:
    def __init__(
        self,
        plugins: PluginRegistry = registry,
        built_in_options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._plugins = plugins
        self._built_in_options = BUILT_IN_OPTIONS if built_in_options is None else built_in_options

    def run(self, args: Sequence[Any]) -> Awaitable[Result]:
        """Start one call; the process-wide defaults are captured now."""
        process_defaults = snapshot_default_options()
        return self._plugins.apply_result_hooks(self._execute(tuple(args), process_defaults))

    async def _execute(self, args: Sequence[Any], process_defaults: Mapping[str, Any]) -> Result:
        descriptor = normalize_arguments(args)
        if isinstance(descriptor, InvalidParam):
            raise descriptor
        descriptor = self._plugins.apply_param_hooks(descriptor)
        descriptor = validate_descriptor(descriptor)
        options = merge_options(descriptor, self._built_in_options, process_defaults)

        transport = create_transport(options)
        _log(
            "request_started",
            method=descriptor.method,
            url=str(descriptor.url),
            return_type=descriptor.return_type.value,
            transport=type(transport).__name__,
        )
        controller = RedirectController(
            transport,
            timeout_seconds=options.timeout_seconds,
            max_redirects=options.max_redirects,
        )

        response: Optional[TransportResponse] = None
        decoded: Optional[AsyncIterator[bytes]] = None
        handed_off = False
        try:
            state = RedirectState.initial(
                descriptor.url,
                descriptor.method,
                options.headers,
                serialize_body(descriptor.body),
            )
            settled = await controller.run(state)
            response = settled.response

            return_type = descriptor.return_type
            decoded = decode_stream(
                response.stream,
                decoders_for_response(settled.state.method, response.headers),
            )
            if return_type is ReturnType.STREAM:
                body: Any = ResponseStream(
                    decoded,
                    closers=(response.aclose, transport.aclose),
                    transformer_options=options.transformer_options,
                )
                handed_off = True
            else:
                body = await materialize(return_type, response.stream, decoded, options.validator)

            result = assemble_result(settled, body)
            _log(
                "request_settled",
                status_code=result.status_code,
                url=str(result.url),
                redirect_count=settled.state.redirect_count,
            )
            return result
        finally:
            if not handed_off:
                await _release(decoded, response, transport)


pipeline = RequestPipeline()
