from __future__ import annotations

from typing import Any, Awaitable

from loguru import logger

from ferryhttp.core import SERVICE_NAME
from ferryhttp.domain.models import RequestDescriptor
from ferryhttp.ports.plugin import ParamHook, Plugin, ResultHook


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class PluginRegistry:
    """Installed plugins, applied in registration order."""

    def __init__(self) -> None:
        self._param_hooks: list[ParamHook] = []
        self._result_hooks: list[ResultHook] = []

    def use(self, plugin: Plugin) -> None:
        has_param_hook = isinstance(plugin, ParamHook)
        has_result_hook = isinstance(plugin, ResultHook)
        if not (has_param_hook or has_result_hook):
            raise TypeError("plugin must define param_hook or result_hook")
        if has_param_hook:
            self._param_hooks.append(plugin)
        if has_result_hook:
            self._result_hooks.append(plugin)
        _log(
            "plugin_installed",
            plugin=type(plugin).__name__,
            param_hook=has_param_hook,
            result_hook=has_result_hook,
        )

    def clear(self) -> None:
        self._param_hooks.clear()
        self._result_hooks.clear()

    def apply_param_hooks(self, descriptor: RequestDescriptor) -> RequestDescriptor:
        for plugin in self._param_hooks:
            descriptor = plugin.param_hook(descriptor)
        return descriptor

    def apply_result_hooks(self, result: Awaitable[Any]) -> Awaitable[Any]:
        for plugin in self._result_hooks:
            result = plugin.result_hook(result)
        return result


registry = PluginRegistry()


def use(plugin: Plugin) -> None:
    registry.use(plugin)
