"""
Discovery of declarative handlers on listener objects.

Methods are marked with `@subscribe_event`, the marker only attaches metadata to the function. A
`HandlerDiscovery` turns a listener instance into `MethodHandler`s grouped by event type, which the
dispatcher hands to the registry.

    >>> class Greeter:
    ...     @subscribe_event(priority=Priority.HIGH)
    ...     def on_ping(self, event: Ping) -> None:
    ...         print("pong")
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar, overload

from eventlite._validation import check_not_none
from eventlite._validation import check_priority
from eventlite._validation import resolve_handler_event_type
from eventlite.events import Priority
from eventlite.exceptions import BindingError
from eventlite.handlers import EventHandler
from eventlite.handlers import MethodHandler
from eventlite.settings import get_global_settings

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

MARKER_ATTRIBUTE = "__eventlite_subscription__"

# region Marker


@dataclass(frozen=True)
class SubscriptionMarker:
    """Metadata attached to a function by `@subscribe_event`."""

    priority: int = Priority.NORMAL
    """Priority of the handler created for the method."""

    event_type: type | None = None
    """Explicit event type, if `None` it is taken from the parameter annotation."""


@overload
def subscribe_event(func: F, /) -> F: ...


@overload
def subscribe_event(
    *, priority: int = Priority.NORMAL, event_type: type | None = None
) -> Callable[[F], F]: ...


def subscribe_event(
    func: Any = None,
    *,
    priority: int = Priority.NORMAL,
    event_type: type | None = None,
) -> Any:
    """
    Decorator marking a listener method as an event handler.

    The function is returned unchanged. Its signature is only validated when a listener instance is
    registered, so mistakes surface as a `BindingError` from `register`.

    Args:
        func (Callable, optional):
            The method to mark. Passed automatically when used without parentheses.
        priority (int):
            Handler priority, lower values run first. Defaults to `Priority.NORMAL`.
        event_type (type, optional):
            Event class handled by the method. Defaults to the annotation of its parameter.

    Returns:
        Either the marked function (when used as `@subscribe_event`) or a decorator function (when
        used as `@subscribe_event(...)`).

    Examples:
        >>> class Audit:
        ...     @subscribe_event
        ...     def on_login(self, event: UserLoggedIn) -> None: ...
        ...
        ...     @subscribe_event(priority=Priority.LOWEST, event_type=UserLoggedOut)
        ...     def on_logout(self, event) -> None: ...
    """
    marker = SubscriptionMarker(
        priority=check_priority(priority, "@subscribe_event"), event_type=event_type
    )

    def decorator(fn: F) -> F:
        if inspect.isclass(fn) or not callable(fn):
            raise TypeError("`@subscribe_event` can only be applied to functions.")
        setattr(fn, MARKER_ATTRIBUTE, marker)
        return fn

    if func is not None:
        # Used as @subscribe_event (without parentheses)
        return decorator(func)

    return decorator


def get_marker(obj: Any) -> SubscriptionMarker | None:
    """Returns the `SubscriptionMarker` attached to `obj`, if any."""
    marker = getattr(obj, MARKER_ATTRIBUTE, None)
    return marker if isinstance(marker, SubscriptionMarker) else None


# region Discovery


class HandlerDiscovery(Protocol):
    """Produces the handlers declared by a listener object, grouped by event type."""

    def discover(self, listener: Any) -> Mapping[type, Sequence[EventHandler]]:
        """
        Builds the handlers declared by `listener`.

        Implementations must be deterministic: calling this twice for the same object must produce
        equal handlers, since unregistering recomputes them to find what was registered.

        Raises:
            BindingError: If a declared handler is malformed.
        """
        ...


class MarkerDiscovery:
    """
    Default discovery based on `@subscribe_event` markers.

    Walks the listener's class (and its bases, unless `include_inherited` is False) in definition
    order. When a name is defined on several classes the most derived definition wins, so an
    unmarked override hides a marked base method.

    Args:
        include_inherited (bool | None): Whether to scan base classes. If None, uses
            `EventliteSettings.include_inherited_handlers`.
    """

    def __init__(self, include_inherited: bool | None = None) -> None:
        self._include_inherited = include_inherited

    @property
    def include_inherited(self) -> bool:
        if self._include_inherited is None:
            return get_global_settings().include_inherited_handlers
        return self._include_inherited

    def discover(self, listener: Any) -> dict[type, list[MethodHandler]]:
        check_not_none(listener, "listener")

        handlers: dict[type, list[MethodHandler]] = {}
        for function, marker in self._marked_functions(type(listener)):
            event_type = resolve_handler_event_type(function, marker.event_type)
            handlers.setdefault(event_type, []).append(
                MethodHandler(
                    priority=marker.priority,
                    event_type=event_type,
                    target=listener,
                    function=function,
                )
            )

        logger.debug(
            f"Discovered {sum(len(h) for h in handlers.values())} handler(s) on "
            f"{type(listener).__qualname__}"
        )
        return handlers

    def _marked_functions(self, cls: type) -> list[tuple[Callable[..., Any], SubscriptionMarker]]:
        """Marked plain functions of `cls`, base classes first, most derived definition wins."""
        classes = reversed(cls.__mro__) if self.include_inherited else [cls]
        resolved: dict[str, Any] = {}
        for klass in classes:
            if klass is object:
                continue
            for name, attribute in vars(klass).items():
                # Re-insert so that overrides keep the position of their latest definition
                resolved.pop(name, None)
                resolved[name] = attribute

        marked = []
        for attribute in resolved.values():
            marker = get_marker(attribute)
            if marker is None:
                continue
            if not inspect.isfunction(attribute):
                raise BindingError(
                    f"@subscribe_event can only mark plain methods, found {attribute!r}. Static "
                    f"and class methods are not supported."
                )
            marked.append((attribute, marker))
        return marked
