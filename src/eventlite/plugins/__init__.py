from eventlite.plugins.default import LoggingPlugin

from .hooks.markers import hook_impl
from .manager import register_plugins
from .manager import register_plugins_entry_points

__all__ = [
    "hook_impl",
    "LoggingPlugin",
    "register_plugins",
    "register_plugins_entry_points",
]
