"""Eventlite: Lightweight in-process event dispatcher with priorities and cancellation."""

__version__ = "0.1.0"

from . import settings
from .discovery import subscribe_event
from .dispatcher import EventDispatcher
from .dispatcher import get_default_dispatcher
from .dispatcher import set_default_dispatcher
from .events import Cancellable
from .events import Event
from .events import Priority
from .events import cancelable
from .handlers import CallableHandler
from .handlers import EventHandler
from .handlers import MethodHandler
from .handlers import handler
from .registry import SubscriberRegistry

__all__ = [
    "CallableHandler",
    "Cancellable",
    "Event",
    "EventDispatcher",
    "EventHandler",
    "MethodHandler",
    "Priority",
    "SubscriberRegistry",
    "cancelable",
    "get_default_dispatcher",
    "handler",
    "set_default_dispatcher",
    "settings",
    "subscribe_event",
]
