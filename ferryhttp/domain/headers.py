"""Header key normalization and layered merging."""
from __future__ import annotations

from typing import Any, Mapping


def normalize_header_key(key: str) -> str:
    """Title-Case a header key; ``x-`` extension headers are lower-cased instead."""
    lowered = key.strip().lower()
    if lowered.startswith("x-"):
        return lowered
    return "-".join(part[:1].upper() + part[1:] for part in lowered.split("-"))


def normalize_headers(headers: Mapping[str, Any]) -> dict[str, str]:
    return {normalize_header_key(str(k)): str(v) for k, v in headers.items()}


def merge_headers(*layers: Mapping[str, Any]) -> dict[str, str]:
    """Merge header layers left to right; a later layer wins on a normalized key collision."""
    merged: dict[str, str] = {}
    for layer in layers:
        merged.update(normalize_headers(layer))
    return merged


def has_header(headers: Mapping[str, str], key: str) -> bool:
    wanted = key.lower()
    return any(k.lower() == wanted for k in headers)
