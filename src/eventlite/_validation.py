"""Internal shared validation functions for handlers, discovery and the registry."""

from __future__ import annotations

import inspect
import typing
from collections.abc import Callable
from typing import Any

from eventlite.exceptions import BindingError
from eventlite.exceptions import MissingArgumentError

PRIMITIVE_TYPES: frozenset[type] = frozenset(
    {int, float, complex, bool, str, bytes, type(None)}
)
"""Parameter types that cannot be used as an event type for a declarative handler."""


def check_not_none(value: Any, name: str) -> None:
    """
    Checks that a required argument was provided.

    Raises:
        MissingArgumentError: If `value` is None.
    """
    if value is None:
        raise MissingArgumentError(f"You must provide a non-null {name}")


def check_event_type(event_type: Any) -> None:
    """
    Checks that `event_type` can be used as a registry key.

    Raises:
        MissingArgumentError: If `event_type` is None.
        TypeError: If `event_type` is not a class.
    """
    check_not_none(event_type, "event type")
    if not isinstance(event_type, type):
        raise TypeError(f"Event types must be classes, got {event_type!r}")


def check_priority(priority: Any, name: str) -> int:
    """
    Checks that a handler priority is an integer and returns it.

    Raises:
        BindingError: If `priority` is not an int (bools are rejected).
    """
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise BindingError(f"Priority of '{name}' must be an integer, got {priority!r}")
    return priority


def resolve_handler_event_type(
    func: Callable[..., Any], declared: type | None, *, bound: bool = True
) -> type:
    """
    Resolves the event type handled by a declarative handler function.

    The function must accept exactly one parameter (besides `self` when `bound` is True). The event
    type is `declared` when given, otherwise the annotation of that parameter.

    Args:
        func: Plain function defined on the listener class.
        declared: Event type given explicitly to the marker, if any.
        bound: Whether the first parameter is `self` and should be skipped.

    Returns:
        The event type the handler subscribes to.

    Raises:
        BindingError: If the arity is wrong or the event type is missing, not a class, or primitive.
    """
    name = getattr(func, "__qualname__", repr(func))
    parameters = list(inspect.signature(func).parameters.values())
    if bound and parameters:
        parameters = parameters[1:]

    if len(parameters) != 1 or parameters[0].kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        raise BindingError(
            f"Subscriber method '{name}' is incorrectly marked with @subscribe_event. Expected 1 "
            f"positional parameter, but found {len(parameters)}. Ensure the method has exactly one "
            f"parameter representing the event type."
        )

    event_type: Any = declared
    if event_type is None:
        try:
            hints = typing.get_type_hints(func)
        except Exception as e:
            raise BindingError(
                f"Could not resolve the annotations of subscriber method '{name}': {e}"
            ) from e
        event_type = hints.get(parameters[0].name)

    if event_type is None:
        raise BindingError(
            f"Subscriber method '{name}' does not declare an event type. Annotate its parameter or "
            f"pass `event_type=` to @subscribe_event."
        )
    if not isinstance(event_type, type):
        raise BindingError(
            f"Subscriber method '{name}' must handle a single event class, found {event_type!r}."
        )
    if event_type in PRIMITIVE_TYPES:
        raise BindingError(
            f"Subscriber method '{name}' cannot accept primitive types. Found primitive type "
            f"'{event_type.__name__}'. Consider wrapping the value in an event class."
        )
    return event_type
