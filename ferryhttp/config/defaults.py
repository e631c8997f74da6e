"""Default option layers.

Two layers sit under every call's own options:

* the built-in layer, derived from :class:`Settings` (environment aware), and
* ``default_options``, a process-wide dict initialized from the built-in layer
  when this module is imported. The host application may mutate it at any
  time; each call snapshots it once when it starts, so later changes never
  reach requests already in flight.

Recognized keys: ``timeout`` (ms), ``headers``, ``max_redirects``, ``agent``,
``transformer_options``, ``fetch``.
"""
from __future__ import annotations

import copy
from typing import Any

from ferryhttp.config.settings import Settings


def built_in_options(settings: Settings | None = None) -> dict[str, Any]:
    settings = settings or Settings()
    return {
        "timeout": settings.timeout,
        "headers": {
            "Accept": settings.accept,
            "Accept-Language": settings.accept_language,
            "Accept-Encoding": settings.accept_encoding,
            "User-Agent": settings.user_agent,
        },
        "max_redirects": settings.max_redirects,
        "transformer_options": {"auto_close": True},
        "fetch": settings.use_fetch,
    }


BUILT_IN_OPTIONS: dict[str, Any] = built_in_options()

default_options: dict[str, Any] = copy.deepcopy(BUILT_IN_OPTIONS)


def reset_default_options() -> None:
    """Restore ``default_options`` to the built-in layer, in place."""
    default_options.clear()
    default_options.update(copy.deepcopy(BUILT_IN_OPTIONS))


def snapshot_default_options() -> dict[str, Any]:
    snapshot = dict(default_options)
    headers = snapshot.get("headers")
    if headers is None:
        snapshot["headers"] = {}
    elif isinstance(headers, dict):
        snapshot["headers"] = dict(headers)
    return snapshot
