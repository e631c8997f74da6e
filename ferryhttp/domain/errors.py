"""Errors raised by the request pipeline.

Transport failures (DNS, refused connections, TLS, broken body streams) are not
listed here: they surface as the transport library's own exceptions.
"""
from __future__ import annotations


class FerryError(Exception):
    """Base for failures produced by ferryhttp itself."""


class InvalidParam(FerryError):
    """Raised before any I/O when a call argument or option is malformed."""

    def __init__(self, param: str) -> None:
        super().__init__(f"Invalid Param:{param}")
        self.param = param


class TimedOut(FerryError):
    """Raised when a hop did not receive response headers within its timeout."""

    def __init__(self) -> None:
        super().__init__("timed out")


class RedirectWithoutLocation(FerryError):
    """Raised when a redirect status arrives without a Location header."""

    def __init__(self) -> None:
        super().__init__("no location header found")


class ValidationFailed(FerryError):
    """Raised when the configured validator rejects a json body."""

    def __init__(self) -> None:
        super().__init__("invalid response body")
