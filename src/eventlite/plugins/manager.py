"""Utility functions to manage the project-wide plugin configuration."""

import logging
from inspect import isclass
from typing import Any

from pluggy import PluginManager

from eventlite.settings import get_global_settings

from .hooks.markers import HOOK_NAMESPACE
from .hooks.specs import DispatcherSpec

logger = logging.getLogger(__name__)

_PLUGIN_ENTRY_POINT = "eventlite.plugins"  # entry-point to load plugins from installed packages
_PLUGIN_MANAGER: PluginManager | None = None


# region API


def register_plugins(*plugins: Any) -> None:
    """
    Register eventlite plugins globally.

    Globally registered plugins are picked up by every `EventDispatcher` created afterwards.
    """
    plugin_manager = _get_global_plugin_manager()
    for plugin in plugins:
        if not plugin_manager.is_registered(plugin):
            _check_plugin_instance(plugin)
            plugin_manager.register(plugin)


def register_plugins_entry_points(_plugin_manager: PluginManager | None = None) -> int:
    """
    Register eventlite plugins from Python package entrypoints.

    Returns:
        The number of plugins loaded.
    """
    _plugin_manager = _plugin_manager if _plugin_manager else _get_global_plugin_manager()
    return _plugin_manager.load_setuptools_entrypoints(_PLUGIN_ENTRY_POINT)  # Doesn't use setuptools


def create_hook_manager_with_plugins(plugins: list[Any]) -> PluginManager:
    """
    Create a new hook manager with both global and dispatcher-specific plugins.

    Used internally by `EventDispatcher` so that each dispatcher has its own set of plugins on top
    of the globally registered ones.

    Args:
        plugins: Additional plugin instances to register.

    Returns:
        A new PluginManager with global + dispatcher-specific plugins.
    """
    # Create new manager with hook specs
    manager = _create_plugin_manager()

    # Copy global plugins
    global_manager = _get_global_plugin_manager()
    for plugin in global_manager.get_plugins():
        if not manager.is_registered(plugin):  # pragma: no branch
            manager.register(plugin)

    # Add dispatcher-specific plugins
    for plugin in plugins:
        if not manager.is_registered(plugin):  # pragma: no branch
            _check_plugin_instance(plugin)
            manager.register(plugin)

    return manager


# region Helpers


def _check_plugin_instance(plugin: Any) -> None:
    if isclass(plugin):
        raise TypeError(
            "eventlite expects plugins to be registered as instances. "
            "Have you forgotten the `()` when registering a plugin class?"
        )


def _initialize_plugin_system() -> PluginManager:
    """Initializes (or resets) the global plugin manager."""
    manager = _create_plugin_manager()
    global _PLUGIN_MANAGER
    _PLUGIN_MANAGER = manager
    return manager


def _get_global_plugin_manager() -> PluginManager:
    """Returns initialized global plugin manager, initializing it if needed."""
    plugin_manager = _PLUGIN_MANAGER
    if plugin_manager is None:
        plugin_manager = _initialize_plugin_system()
    return plugin_manager


def _create_plugin_manager() -> PluginManager:
    """Create a new PluginManager instance and register eventlite's hook specs."""
    manager = PluginManager(HOOK_NAMESPACE)
    if get_global_settings().trace_hooks:
        manager.trace.root.setwriter(logger.debug)
        manager.enable_tracing()
    manager.add_hookspecs(DispatcherSpec)
    return manager
