"""Handlers bind a priority to a piece of code that reacts to one event type."""

from __future__ import annotations

import abc
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from typing_extensions import override

from eventlite._validation import check_not_none
from eventlite._validation import check_priority
from eventlite.events import Priority
from eventlite.exceptions import BindingError
from eventlite.exceptions import HandlerInvocationError
from eventlite.settings import get_global_settings

logger = logging.getLogger(__name__)

EventT = TypeVar("EventT")

# region Handlers


@dataclass(frozen=True, eq=False, kw_only=True)
class EventHandler(abc.ABC):
    """
    Base class for all handlers stored in a `SubscriberRegistry`.

    Handlers are immutable. Their equality must stay stable for as long as they are subscribed,
    since it is what `unsubscribe` uses to locate them.
    """

    priority: int = Priority.NORMAL
    """Ordering key, lower priorities run first."""

    event_type: type | None = None
    """Event class this handler was written for, `None` if it accepts anything it is given."""

    def __post_init__(self) -> None:
        check_priority(self.priority, self.name)

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Human readable name used in log messages."""
        raise NotImplementedError()

    @abc.abstractmethod
    def invoke(self, event: Any) -> None:
        """
        Processes the given event.

        Args:
            event: Event value being dispatched.
        """
        raise NotImplementedError()

    def check_compatible(self, event_type: type) -> None:
        """
        Checks that this handler may be subscribed under `event_type`.

        Raises:
            BindingError: If the handler declares an event type that `event_type` is not a
                subclass of.
        """
        if self.event_type is not None and not issubclass(event_type, self.event_type):
            raise BindingError(
                f"Handler '{self.name}' expects '{self.event_type.__qualname__}' events and cannot "
                f"be subscribed to '{event_type.__qualname__}'"
            )


@dataclass(frozen=True, eq=False, kw_only=True)
class CallableHandler(EventHandler, Generic[EventT]):
    """
    Handler backed by a plain callable.

    The event is passed to the callback as-is. If `event_type` is given it is validated once, when
    the handler is subscribed, otherwise getting the event type right is up to the caller.

    Two handlers are equal when they wrap the very same callback with the same priority.
    """

    callback: Callable[[EventT], Any]
    """The callable invoked with each event."""

    def __post_init__(self) -> None:
        check_not_none(self.callback, "callback")
        if not callable(self.callback):
            raise TypeError(f"Handler callbacks must be callable, got {self.callback!r}")
        super().__post_init__()

    @property
    @override
    def name(self) -> str:
        return getattr(self.callback, "__qualname__", repr(self.callback))

    @override
    def invoke(self, event: Any) -> None:
        self.callback(event)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CallableHandler):
            return NotImplemented
        return self.callback is other.callback and self.priority == other.priority

    def __hash__(self) -> int:
        return hash((id(self.callback), self.priority))

    def __repr__(self) -> str:
        return f"CallableHandler({self.name}, priority={self.priority})"


@dataclass(frozen=True, eq=False, kw_only=True)
class MethodHandler(EventHandler):
    """
    Handler backed by a method of a listener object, built by a discovery collaborator.

    Any exception raised while calling the method is wrapped in a `HandlerInvocationError` and
    logged, it never escapes `invoke`.

    Two handlers are equal when they call the same function on the same target object with the same
    priority, so handlers rebuilt from the same listener compare equal to the originals.
    """

    target: Any
    """Listener object the method is bound to."""

    function: Callable[..., Any]
    """Plain function (not bound) called as `function(target, event)`."""

    def __post_init__(self) -> None:
        check_not_none(self.target, "target")
        check_not_none(self.function, "method")
        super().__post_init__()

    @property
    @override
    def name(self) -> str:
        return getattr(self.function, "__qualname__", repr(self.function))

    @override
    def invoke(self, event: Any) -> None:
        check_not_none(event, "event")
        try:
            self.function(self.target, event)
        except Exception as e:
            report_handler_failure(self, event, e)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MethodHandler):
            return NotImplemented
        return (
            self.target is other.target
            and self.function is other.function
            and self.priority == other.priority
        )

    def __hash__(self) -> int:
        return hash((id(self.target), self.function, self.priority))

    def __repr__(self) -> str:
        return f"MethodHandler({self.name}, priority={self.priority})"


# region Helpers


def handler(
    callback: Callable[[EventT], Any],
    *,
    priority: int = Priority.NORMAL,
    event_type: type[EventT] | None = None,
) -> CallableHandler[EventT]:
    """
    Wraps a callable into a `CallableHandler`.

    Args:
        callback: Callable taking the event as its only argument.
        priority: Handler priority, lower values run first. Defaults to `Priority.NORMAL`.
        event_type: Event class the callback expects, validated when the handler is subscribed.

    Returns:
        The new handler, which can later be used to unsubscribe.

    Examples:
        >>> ping_handler = handler(lambda event: print("pong"), priority=Priority.HIGH)
    """
    return CallableHandler(priority=priority, event_type=event_type, callback=callback)


def report_handler_failure(
    failed: EventHandler, event: Any, error: Exception
) -> HandlerInvocationError:
    """
    Wraps and logs an exception raised by a handler while processing an event.

    Args:
        failed: The handler that raised.
        event: The event being processed.
        error: The exception raised by the handler.

    Returns:
        The logged `HandlerInvocationError`, chained to `error`.
    """
    if isinstance(error, HandlerInvocationError):
        wrapped = error
    else:
        wrapped = HandlerInvocationError(
            f"Exception thrown by handler '{failed.name}' for '{type(event).__qualname__}': "
            f"{error!r}",
            handler=failed,
            event=event,
        )
        wrapped.__cause__ = error

    level = get_global_settings().handler_error_level
    logger.log(level, f"Failed to invoke handler: {failed!r}", exc_info=wrapped)
    return wrapped
