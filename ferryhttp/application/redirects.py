"""Redirect controller: drives hops until a response settles the call.

Each hop goes Dispatching -> AwaitingResponse and then either Redirecting
(back to Dispatching with the next RedirectState), Settling (the response is
returned as is) or Failed (timeout, transport error, redirect without a
Location).
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from loguru import logger

from ferryhttp.constants import LOCATION, REDIRECT_STATUSES
from ferryhttp.core import SERVICE_NAME
from ferryhttp.domain.errors import RedirectWithoutLocation, TimedOut
from ferryhttp.domain.models import RedirectState
from ferryhttp.ports.transport import Transport, TransportResponse


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class HopState(str, Enum):
    DISPATCHING = "dispatching"
    AWAITING_RESPONSE = "awaiting_response"
    REDIRECTING = "redirecting"
    SETTLING = "settling"
    FAILED = "failed"


@dataclass(frozen=True)
class SettledHop:
    """The final hop: the request state that produced it and its open response."""

    state: RedirectState
    response: TransportResponse


class RedirectController:
    def __init__(self, transport: Transport, *, timeout_seconds: Optional[float], max_redirects: float) -> None:
        self._transport = transport
        self._timeout_seconds = timeout_seconds
        self._max_redirects = max_redirects

    def should_redirect(self, state: RedirectState, response: TransportResponse) -> bool:
        return response.status_code in REDIRECT_STATUSES and state.redirect_count < self._max_redirects

    async def run(self, state: RedirectState) -> SettledHop:
        """Follow redirects from ``state``; the returned response is still open.

        Every response other than the settled one is closed before the next
        hop is dispatched or the error is raised.
        """
        while True:
            response = await self._dispatch(state)
            if not self.should_redirect(state, response):
                _log(
                    "hop_settled",
                    hop_state=HopState.SETTLING.value,
                    status_code=response.status_code,
                    redirect_count=state.redirect_count,
                )
                return SettledHop(state=state, response=response)

            location = response.headers.get(LOCATION)
            await response.aclose()
            if not location:
                _log("redirect_failed", hop_state=HopState.FAILED.value, url=str(state.url))
                raise RedirectWithoutLocation()

            target = state.url.join(location)
            _log(
                "redirect_followed",
                hop_state=HopState.REDIRECTING.value,
                status_code=response.status_code,
                location=str(target),
                redirect_count=state.redirect_count + 1,
            )
            state = state.follow(target)

    async def _dispatch(self, state: RedirectState) -> TransportResponse:
        _log(
            "request_dispatched",
            hop_state=HopState.DISPATCHING.value,
            method=state.method,
            url=str(state.url),
            redirect_count=state.redirect_count,
        )
        try:
            response = await asyncio.wait_for(
                self._transport.execute(state.url, state.method, state.headers, state.payload),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError:
            _log("hop_timed_out", hop_state=HopState.FAILED.value, timeout_seconds=self._timeout_seconds)
            raise TimedOut() from None
        _log("hop_response", hop_state=HopState.AWAITING_RESPONSE.value, status_code=response.status_code)
        return response
