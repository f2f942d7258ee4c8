"""Default plugins shipped with eventlite."""

from eventlite.plugins.default.logging import LoggingPlugin

__all__ = [
    "LoggingPlugin",
]
