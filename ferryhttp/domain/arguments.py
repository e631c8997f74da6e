"""Argument normalizer: resolves the two call shapes into a RequestDescriptor.

    (url, return_type, options=None, body=None)
    (method, url, return_type, options=None, body=None)

The first argument decides the shape: if it parses as an absolute URL the short
form is assumed and the method is inferred from the presence of a body;
otherwise a string first argument is taken as the method token.
"""
from __future__ import annotations

from typing import Any, Mapping, Sequence, Union

import httpx

from ferryhttp.constants import HttpMethod
from ferryhttp.domain.errors import InvalidParam
from ferryhttp.domain.models import RequestDescriptor

NormalizedArguments = Union[RequestDescriptor, InvalidParam]


def parse_absolute_url(value: Any) -> httpx.URL | None:
    """Return ``value`` as a URL carrying a scheme, or None when it has none."""
    if isinstance(value, httpx.URL):
        return value if value.scheme else None
    if not isinstance(value, str):
        return None
    try:
        url = httpx.URL(value.strip())
    except (httpx.InvalidURL, TypeError, ValueError):
        return None
    return url if url.scheme else None


def _positional(args: Sequence[Any], index: int) -> Any:
    return args[index] if len(args) > index else None


def _body_from(explicit: Any, options: Any) -> Any:
    if explicit is not None:
        return explicit
    if isinstance(options, Mapping):
        return options.get("body")
    return None


def normalize_arguments(args: Sequence[Any]) -> NormalizedArguments:
    """Parse positional call arguments; never raises, errors are returned."""
    first = _positional(args, 0)
    url = parse_absolute_url(first)

    if url is not None:
        options = _positional(args, 2)
        options = {} if options is None else options
        body = _body_from(_positional(args, 3), options)
        method = HttpMethod.POST.value if body is not None else HttpMethod.GET.value
        return RequestDescriptor(
            method=method,
            url=url,
            return_type=_positional(args, 1),
            options=options,
            body=body,
        )

    if not isinstance(first, str):
        return InvalidParam("url")

    url = parse_absolute_url(_positional(args, 1))
    if url is None:
        return InvalidParam("url")

    options = _positional(args, 3)
    options = {} if options is None else options
    return RequestDescriptor(
        method=first.strip().upper(),
        url=url,
        return_type=_positional(args, 2),
        options=options,
        body=_body_from(_positional(args, 4), options),
    )
