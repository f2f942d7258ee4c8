"""
Logging plugin reporting the dispatch lifecycle.

Example:
    >>> from eventlite import EventDispatcher
    >>> from eventlite.plugins import LoggingPlugin
    >>>
    >>> dispatcher = EventDispatcher(plugins=[LoggingPlugin(level=logging.INFO)])
"""

import logging
from typing import Any

from eventlite.handlers import EventHandler
from eventlite.plugins.hooks.markers import hook_impl

DEFAULT_LOGGER_NAME = "eventlite.dispatch"


class LoggingPlugin:
    """
    Plugin that logs each dispatch and listener (un)registration.

    Args:
        level: Log level for the records. Defaults to DEBUG.
        logger_name: Name of the logger to write to. Defaults to "eventlite.dispatch".
    """

    def __init__(self, level: int = logging.DEBUG, logger_name: str = DEFAULT_LOGGER_NAME):
        self._level = level
        self._logger = logging.getLogger(logger_name)

    @hook_impl
    def before_event_dispatch(self, event: Any, handlers: tuple[EventHandler, ...]) -> None:
        self._logger.log(
            self._level, f"Dispatching {type(event).__qualname__} to {len(handlers)} handler(s)"
        )

    @hook_impl
    def after_event_dispatch(
        self,
        event: Any,
        handlers: tuple[EventHandler, ...],
        cancelled: bool,
        duration: float,
    ) -> None:
        outcome = "cancelled" if cancelled else "completed"
        self._logger.log(
            self._level,
            f"Dispatch of {type(event).__qualname__} {outcome} in {duration * 1000:.3f}ms",
        )

    @hook_impl
    def on_listener_registered(self, listener: Any, event_types: list[type]) -> None:
        names = sorted(t.__qualname__ for t in event_types)
        self._logger.log(
            self._level, f"Registered listener {type(listener).__qualname__} for {names}"
        )

    @hook_impl
    def on_listener_unregistered(self, listener: Any, event_types: list[type]) -> None:
        names = sorted(t.__qualname__ for t in event_types)
        self._logger.log(
            self._level, f"Unregistered listener {type(listener).__qualname__} from {names}"
        )
