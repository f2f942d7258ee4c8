"""
Centralized exception classes for the eventlite library.

All eventlite-specific exceptions inherit from EventliteError for easy catching.
"""

from __future__ import annotations

from typing import Any


class EventliteError(Exception):
    """Base exception for all eventlite errors."""


class BindingError(EventliteError):
    """Raised when a handler binding is declared incorrectly (arity, event type, priority)."""


class MissingArgumentError(EventliteError, TypeError):
    """Raised when a required argument is `None`."""


class HandlerInvocationError(EventliteError):
    """
    Raised (and reported) when a handler fails while processing an event.

    The original exception is always available as `__cause__`. Dispatch never propagates this
    error to its caller, it is logged and the next handler runs.
    """

    def __init__(self, message: str, *, handler: Any, event: Any) -> None:
        super().__init__(message)
        self.handler = handler
        self.event = event
