from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

_GLOBAL_EVENTLITE_SETTINGS: EventliteSettings | None = None
_SETTINGS_LOCK = threading.RLock()


@dataclass(frozen=True)
class EventliteSettings:
    """Configuration settings for eventlite."""

    handler_error_level: int = logging.ERROR
    """Log level used when a handler fails during dispatch."""

    include_inherited_handlers: bool = True
    """
    Whether handler discovery also scans the base classes of a listener.

    If False, only methods defined directly on the listener's concrete class are considered.
    """

    trace_hooks: bool = False
    """Enable pluggy hook tracing (written to the plugin manager's debug logger)."""


def get_global_settings() -> EventliteSettings:
    """
    Get the global eventlite settings instance (thread-safe).

    If no global settings have been set, returns a default instance.
    """
    with _SETTINGS_LOCK:
        global _GLOBAL_EVENTLITE_SETTINGS
        if _GLOBAL_EVENTLITE_SETTINGS is None:
            _GLOBAL_EVENTLITE_SETTINGS = EventliteSettings()
        return _GLOBAL_EVENTLITE_SETTINGS


def set_global_settings(settings: EventliteSettings) -> None:
    """
    Set the global eventlite settings instance (thread-safe).

    Note: `trace_hooks` is read when a dispatcher creates its plugin manager, so it only affects
    dispatchers created after the change.

    Args:
        settings (EventliteSettings): Settings to set as global.
    """
    with _SETTINGS_LOCK:
        global _GLOBAL_EVENTLITE_SETTINGS
        _GLOBAL_EVENTLITE_SETTINGS = settings
