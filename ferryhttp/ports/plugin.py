"""Plugin port: the two extension points a call passes through.

A plugin defines ``param_hook``, ``result_hook``, or both. ``param_hook``
receives the normalized descriptor before validation and returns the
descriptor to continue with. ``result_hook`` receives the awaitable of the
whole execution and returns the awaitable the caller gets.
"""
from __future__ import annotations

from typing import Any, Awaitable, Protocol, Union, runtime_checkable

from ferryhttp.domain.models import RequestDescriptor


@runtime_checkable
class ParamHook(Protocol):
    def param_hook(self, descriptor: RequestDescriptor) -> RequestDescriptor: ...


@runtime_checkable
class ResultHook(Protocol):
    def result_hook(self, result: Awaitable[Any]) -> Awaitable[Any]: ...


Plugin = Union[ParamHook, ResultHook]
