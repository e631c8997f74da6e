"""Option merger: built-in defaults < process-wide defaults < per-call options."""
from __future__ import annotations

import math
from typing import Any, Callable, Mapping, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError, field_validator

from ferryhttp.constants import CONTENT_TYPE, JSON_CONTENT_TYPE
from ferryhttp.domain.errors import InvalidParam
from ferryhttp.domain.headers import has_header, merge_headers
from ferryhttp.domain.models import RequestDescriptor
from ferryhttp.domain.request_body import is_json_payload


def _require_number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        raise ValueError("must be a number")
    return value


class RequestOptions(BaseModel):
    """Effective options of one call."""

    model_config = ConfigDict(frozen=True, extra="ignore", arbitrary_types_allowed=True)

    # Fields validate in declaration order; the first error names the InvalidParam
    timeout: float
    max_redirects: float
    headers: dict[str, str] = Field(default_factory=dict, repr=False)
    agent: Any = Field(default=None, repr=False)
    transformer_options: dict[str, Any] = Field(default_factory=dict)
    fetch: Union[StrictBool, httpx.AsyncClient] = False
    validator: Optional[Callable[[Any], Any]] = Field(default=None, repr=False)

    @field_validator("timeout", mode="before")
    @classmethod
    def _check_timeout(cls, v: Any) -> float:
        v = _require_number(v)
        if v < 1:
            raise ValueError("timeout must be >= 1")
        return v

    @field_validator("max_redirects", mode="before")
    @classmethod
    def _check_max_redirects(cls, v: Any) -> float:
        v = _require_number(v)
        if v < 0:
            raise ValueError("max_redirects must be >= 0")
        return v

    @field_validator("transformer_options", mode="before")
    @classmethod
    def _default_transformer_options(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def timeout_seconds(self) -> Optional[float]:
        # An infinite timeout means no per-hop timer
        if math.isinf(self.timeout):
            return None
        return self.timeout / 1000


def _headers_layer(layer: Mapping[str, Any]) -> Mapping[str, Any]:
    headers = layer.get("headers")
    if headers is None:
        return {}
    if not isinstance(headers, Mapping):
        raise InvalidParam("headers")
    return headers


def merge_options(
    descriptor: RequestDescriptor,
    built_in: Mapping[str, Any],
    process_defaults: Mapping[str, Any],
) -> RequestOptions:
    """Merge the three option layers of a validated descriptor.

    Raises InvalidParam naming the first option that fails validation.
    """
    overrides = descriptor.options
    merged: dict[str, Any] = {**built_in, **process_defaults, **overrides}
    merged.pop("body", None)

    headers = merge_headers(
        _headers_layer(built_in),
        _headers_layer(process_defaults),
        _headers_layer(overrides),
    )
    if is_json_payload(descriptor.body) and not has_header(headers, CONTENT_TYPE):
        headers[CONTENT_TYPE] = JSON_CONTENT_TYPE
    merged["headers"] = headers

    try:
        return RequestOptions.model_validate(merged)
    except ValidationError as exc:
        location = exc.errors()[0].get("loc") or ("options",)
        raise InvalidParam(str(location[0])) from None
