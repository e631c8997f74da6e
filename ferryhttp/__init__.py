"""ferryhttp: one awaitable entry point for HTTP requests over httpcore or httpx."""
from ferryhttp.api import (
    buffer,
    delete,
    empty,
    get,
    head,
    json,
    options,
    patch,
    post,
    put,
    request,
    stream,
    string,
    trace,
)
from ferryhttp.application.materializer import ResponseStream
from ferryhttp.application.plugins import use
from ferryhttp.config.defaults import default_options, reset_default_options
from ferryhttp.constants import HttpMethod, ReturnType
from ferryhttp.domain.errors import (
    FerryError,
    InvalidParam,
    RedirectWithoutLocation,
    TimedOut,
    ValidationFailed,
)
from ferryhttp.domain.models import RequestDescriptor, Result
from ferryhttp.ports.plugin import Plugin

__all__ = [
    "FerryError",
    "HttpMethod",
    "InvalidParam",
    "Plugin",
    "RedirectWithoutLocation",
    "RequestDescriptor",
    "ResponseStream",
    "Result",
    "ReturnType",
    "TimedOut",
    "ValidationFailed",
    "buffer",
    "default_options",
    "delete",
    "empty",
    "get",
    "head",
    "json",
    "options",
    "patch",
    "post",
    "put",
    "request",
    "reset_default_options",
    "stream",
    "string",
    "trace",
    "use",
]
