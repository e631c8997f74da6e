"""Library-level constants shared across modules."""
from __future__ import annotations

from enum import Enum


class HttpMethod(str, Enum):
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    PATCH = "PATCH"


class ReturnType(str, Enum):
    """How the response body is handed back to the caller."""

    STRING = "string"
    BUFFER = "buffer"
    STREAM = "stream"
    JSON = "json"
    EMPTY = "empty"


SUPPORTED_SCHEMES = frozenset({"http", "https"})
REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})

# Header keys as produced by domain.headers.normalize_header_key
CONTENT_TYPE = "Content-Type"
CONTENT_LENGTH = "Content-Length"
TRANSFER_ENCODING = "Transfer-Encoding"
COOKIE = "Cookie"
AUTHORIZATION = "Authorization"
HOST = "Host"
CONTENT_ENCODING = "Content-Encoding"
LOCATION = "Location"

JSON_CONTENT_TYPE = "application/json"
