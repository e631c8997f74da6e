"""Domain models."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, AsyncIterator, Mapping, Union

import httpx

from ferryhttp.constants import (
    AUTHORIZATION,
    CONTENT_LENGTH,
    CONTENT_TYPE,
    COOKIE,
    HOST,
    HttpMethod,
)

# Serialized request body handed to a transport
RequestPayload = Union[bytes, AsyncIterator[bytes], None]


@dataclass(frozen=True)
class RequestDescriptor:
    """Canonical form of one call, before options are merged."""

    method: str
    url: httpx.URL
    return_type: Any
    options: Any = field(default_factory=dict)
    body: Any = None


def same_origin(a: httpx.URL, b: httpx.URL) -> bool:
    return (a.scheme, a.host, a.port) == (b.scheme, b.host, b.port)


@dataclass(frozen=True)
class RedirectState:
    """Request state carried from hop to hop; replaced, never mutated."""

    url: httpx.URL
    original_url: httpx.URL
    method: str
    headers: Mapping[str, str]
    payload: RequestPayload = None
    redirect_count: int = 0

    @classmethod
    def initial(
        cls,
        url: httpx.URL,
        method: str,
        headers: Mapping[str, str],
        payload: RequestPayload,
    ) -> "RedirectState":
        return cls(url=url, original_url=url, method=method, headers=dict(headers), payload=payload)

    def follow(self, target: httpx.URL) -> "RedirectState":
        """State for the hop to ``target``.

        Credentials are dropped when the target leaves the origin of the first
        request (not of the previous hop). A POST becomes a bodiless GET.
        """
        headers = dict(self.headers)
        if not same_origin(self.original_url, target):
            headers.pop(COOKIE, None)
            headers.pop(AUTHORIZATION, None)
        headers.pop(HOST, None)

        method = self.method
        payload = self.payload
        if method == HttpMethod.POST:
            method = HttpMethod.GET.value
            payload = None
            headers.pop(CONTENT_TYPE, None)
            headers.pop(CONTENT_LENGTH, None)

        return replace(
            self,
            url=target,
            method=method,
            headers=headers,
            payload=payload,
            redirect_count=self.redirect_count + 1,
        )


@dataclass(frozen=True)
class Result:
    """Terminal outcome of one call."""

    status_code: int
    headers: httpx.Headers = field(repr=False)
    body: Any = field(repr=False)
    url: httpx.URL
    request: Any = field(default=None, repr=False)
    response: Any = field(default=None, repr=False)
