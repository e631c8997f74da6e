"""Validator: rejects malformed descriptors before any option merging or I/O."""
from __future__ import annotations

from dataclasses import replace
from enum import Enum
from typing import Any, Mapping, TypeVar

from ferryhttp.constants import SUPPORTED_SCHEMES, HttpMethod, ReturnType
from ferryhttp.domain.errors import InvalidParam
from ferryhttp.domain.models import RequestDescriptor

_E = TypeVar("_E", bound=Enum)


def _member(enum_cls: type[_E], value: Any) -> _E | None:
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return None


def validate_descriptor(descriptor: RequestDescriptor) -> RequestDescriptor:
    """Return a validated copy; raise InvalidParam for the first failing field.

    Order: method, return_type, options, url.
    """
    method = _member(HttpMethod, descriptor.method)
    if method is None:
        raise InvalidParam("method")

    return_type = _member(ReturnType, descriptor.return_type)
    if return_type is None:
        raise InvalidParam("return_type")

    if not isinstance(descriptor.options, Mapping):
        raise InvalidParam("options")

    url = descriptor.url
    if url.scheme not in SUPPORTED_SCHEMES or not url.host:
        raise InvalidParam("url")

    return replace(descriptor, method=method.value, return_type=return_type)
