"""Public entry point and shorthand helpers.

    await request(url, return_type, options=None, body=None)
    await request(method, url, return_type, options=None, body=None)

Shorthands fix either the return type (``string``, ``buffer``, ...) or the
method (``get``, ``post``, ...). ``head``, ``put`` and ``trace`` always use
the ``empty`` return type.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from ferryhttp.constants import HttpMethod, ReturnType
from ferryhttp.domain.models import Result
from ferryhttp.application.pipeline import pipeline

Options = Optional[Mapping[str, Any]]


async def request(*args: Any) -> Result:
    return await pipeline.run(args)


async def string(url: Any, options: Options = None, body: Any = None) -> Result:
    return await request(url, ReturnType.STRING.value, options, body)


async def buffer(url: Any, options: Options = None, body: Any = None) -> Result:
    return await request(url, ReturnType.BUFFER.value, options, body)


async def stream(url: Any, options: Options = None, body: Any = None) -> Result:
    return await request(url, ReturnType.STREAM.value, options, body)


async def json(url: Any, options: Options = None, body: Any = None) -> Result:
    return await request(url, ReturnType.JSON.value, options, body)


async def empty(url: Any, options: Options = None, body: Any = None) -> Result:
    return await request(url, ReturnType.EMPTY.value, options, body)


async def get(url: Any, return_type: Any, options: Options = None) -> Result:
    return await request(HttpMethod.GET.value, url, return_type, options)


async def head(url: Any, options: Options = None) -> Result:
    return await request(HttpMethod.HEAD.value, url, ReturnType.EMPTY.value, options)


async def post(url: Any, return_type: Any, options: Options = None, body: Any = None) -> Result:
    return await request(HttpMethod.POST.value, url, return_type, options, body)


async def put(url: Any, options: Options = None, body: Any = None) -> Result:
    return await request(HttpMethod.PUT.value, url, ReturnType.EMPTY.value, options, body)


async def delete(url: Any, return_type: Any, options: Options = None, body: Any = None) -> Result:
    return await request(HttpMethod.DELETE.value, url, return_type, options, body)


async def options(url: Any, return_type: Any, options: Options = None) -> Result:
    return await request(HttpMethod.OPTIONS.value, url, return_type, options)


async def trace(url: Any, options: Options = None) -> Result:
    return await request(HttpMethod.TRACE.value, url, ReturnType.EMPTY.value, options)


async def patch(url: Any, return_type: Any, options: Options = None, body: Any = None) -> Result:
    return await request(HttpMethod.PATCH.value, url, return_type, options, body)
