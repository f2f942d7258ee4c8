"""
Event values and the optional cancellation capability.

Any object can be dispatched, lookup is done on its exact runtime type. Deriving from `Event`
adds the cancellation capability, which a concrete class opts into with `@cancelable`:

    >>> @cancelable
    ... class Ping(Event):
    ...     pass
    >>> event = Ping()
    >>> event.cancel()
    >>> event.cancelled
    True
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Protocol, TypeVar, runtime_checkable

C = TypeVar("C", bound=type)


class Priority(IntEnum):
    """
    Named priority levels for handlers.

    Handlers run in ascending priority order, so `LOWEST` runs first. These are only a convention,
    any integer is a valid priority.
    """

    LOWEST = -2
    LOW = -1
    NORMAL = 0
    HIGH = 1
    HIGHEST = 2


@runtime_checkable
class Cancellable(Protocol):
    """
    Capability of an event value that handlers may suppress.

    `cancelable` and `cancelled` may be exposed as attributes, properties or zero-argument methods.
    """

    @property
    def cancelable(self) -> bool: ...

    @property
    def cancelled(self) -> bool: ...

    def cancel(self) -> None: ...

    def resume(self) -> None: ...


class Event:
    """
    Base class for events that expose the cancellation capability.

    `cancelable` is fixed when the instance is created and is only True for classes decorated with
    `@cancelable`. `cancelled` is always False for events that are not cancelable, even after
    `cancel()` has been called.
    """

    __eventlite_cancelable__: bool = False

    # NOTE: State is set in __new__ so that dataclass subclasses, which generate their own
    # __init__ without calling super(), still carry it. The opt-in is only read from the concrete
    # class itself, subclasses of a cancelable event must be decorated again.
    def __new__(cls, *args: Any, **kwargs: Any) -> Event:
        instance = super().__new__(cls)
        object.__setattr__(instance, "_cancelable", vars(cls).get("__eventlite_cancelable__", False))
        object.__setattr__(instance, "_cancelled", False)
        return instance

    @property
    def cancelable(self) -> bool:
        """Whether this event can be cancelled."""
        return self._cancelable

    @property
    def cancelled(self) -> bool:
        """Whether this event is cancelable and has been cancelled."""
        return self._cancelable and self._cancelled

    def cancel(self) -> None:
        """Mark the event as cancelled."""
        object.__setattr__(self, "_cancelled", True)

    def resume(self) -> None:
        """Clear a previous `cancel()` so the event proceeds."""
        object.__setattr__(self, "_cancelled", False)


def cancelable(cls: C) -> C:
    """
    Class decorator that opts an `Event` subclass into cancellation.

    Raises:
        TypeError: If `cls` is not a subclass of `Event`.
    """
    if not isinstance(cls, type) or not issubclass(cls, Event):
        raise TypeError("`@cancelable` can only be applied to subclasses of `Event`.")
    cls.__eventlite_cancelable__ = True
    return cls


def _read_flag(event: Any, name: str) -> bool:
    """Reads a capability flag exposed either as an attribute/property or as a method."""
    value = getattr(event, name)
    if callable(value):
        value = value()
    return bool(value)


def is_cancelled(event: Any) -> bool:
    """Returns True if `event` has the cancellation capability and reports itself cancelled."""
    if not isinstance(event, Cancellable):
        return False
    return _read_flag(event, "cancelable") and _read_flag(event, "cancelled")
