"""
Thread-safe storage of handlers keyed by exact event type.

Each event type owns a `_SubscriberSet` holding an immutable, priority-sorted tuple of handlers.
Mutations build a new tuple under the set's lock and swap it in, so readers never lock and any
snapshot already handed out stays valid while other threads subscribe or unsubscribe.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Any

from eventlite._validation import check_event_type
from eventlite._validation import check_not_none
from eventlite.handlers import EventHandler

logger = logging.getLogger(__name__)


def _sort_key(handler: EventHandler) -> int:
    return handler.priority


class _SubscriberSet:
    """Copy-on-write, priority-ordered handlers of a single event type."""

    __slots__ = ("_lock", "_snapshot", "retired")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot: tuple[EventHandler, ...] = ()
        # Set once the set was emptied and dropped from the registry, it must not be reused
        self.retired = False

    @property
    def snapshot(self) -> tuple[EventHandler, ...]:
        return self._snapshot

    @property
    def lock(self) -> threading.Lock:
        return self._lock

    def add(self, handlers: Iterable[EventHandler]) -> None:
        """Adds handlers and re-sorts, caller must hold `lock`. Sorting is stable."""
        self._snapshot = tuple(sorted((*self._snapshot, *handlers), key=_sort_key))

    def remove(self, handlers: Iterable[EventHandler]) -> int:
        """
        Removes one occurrence of each handler, caller must hold `lock`.

        Returns:
            The number of handlers actually removed.
        """
        remaining = list(self._snapshot)
        removed = 0
        for handler in handlers:
            try:
                remaining.remove(handler)
            except ValueError:
                continue
            removed += 1
        if removed:
            self._snapshot = tuple(remaining)
        return removed


class SubscriberRegistry:
    """
    Registry mapping event types to priority-ordered handlers.

    All operations are safe to call concurrently. Lookups never block, mutations of one event type
    only serialize with other mutations of the same event type, and creating or dropping an event
    type entry is serialized by a registry-wide lock that readers never take.

    The registry also tracks which listener objects were registered, by identity, so that
    registering the same listener twice can be detected.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, _SubscriberSet] = {}
        self._subscribers_lock = threading.Lock()
        self._listeners: dict[int, Any] = {}
        self._listeners_lock = threading.Lock()

    # region Subscribers

    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        """
        Subscribes a handler to an event type.

        The same handler may be subscribed more than once, it is then called once per subscription.

        Args:
            event_type: Exact event class the handler is called for.
            handler: Handler to add.

        Raises:
            BindingError: If the handler declares an incompatible event type.
        """
        self.subscribe_all(event_type, [handler])

    def subscribe_all(self, event_type: type, handlers: Iterable[EventHandler]) -> None:
        """
        Subscribes several handlers to an event type.

        Handlers with equal priorities keep their insertion order, the given handlers being inserted
        after the ones already subscribed.

        Args:
            event_type: Exact event class the handlers are called for.
            handlers: Handlers to add.

        Raises:
            BindingError: If a handler declares an incompatible event type, nothing is subscribed.
        """
        check_event_type(event_type)
        check_not_none(handlers, "handlers")
        handlers = tuple(handlers)
        for handler in handlers:
            check_not_none(handler, "handler")
            if not isinstance(handler, EventHandler):
                raise TypeError(f"Expected an EventHandler, got {handler!r}")
            handler.check_compatible(event_type)
        if not handlers:
            return

        while True:
            subscribers = self._get_or_create(event_type)
            with subscribers.lock:
                if subscribers.retired:
                    # Lost a race with the unsubscribe that emptied this set, start over
                    continue
                subscribers.add(handlers)
                break

        logger.debug(f"Subscribed {len(handlers)} handler(s) to {event_type.__qualname__}")

    def unsubscribe(self, event_type: type, handler: EventHandler) -> None:
        """
        Unsubscribes a handler from an event type.

        Removes a single occurrence of the handler. Unsubscribing a handler that is not subscribed
        does nothing. When the last handler is removed the event type entry itself is dropped.

        Args:
            event_type: Event class the handler was subscribed to.
            handler: Handler to remove.
        """
        self.unsubscribe_all(event_type, [handler])

    def unsubscribe_all(self, event_type: type, handlers: Iterable[EventHandler]) -> None:
        """
        Unsubscribes several handlers from an event type.

        One occurrence is removed per given handler, missing handlers are ignored.

        Args:
            event_type: Event class the handlers were subscribed to.
            handlers: Handlers to remove.
        """
        check_event_type(event_type)
        check_not_none(handlers, "handlers")

        subscribers = self._subscribers.get(event_type)
        if subscribers is None:
            # Nothing subscribed, e.g. a listener that was never fully registered
            return

        with subscribers.lock:
            if subscribers.retired:
                return
            removed = subscribers.remove(handlers)
            if not removed:
                return
            emptied = not subscribers.snapshot
            if emptied:
                subscribers.retired = True
                with self._subscribers_lock:
                    if self._subscribers.get(event_type) is subscribers:
                        del self._subscribers[event_type]

        logger.debug(f"Unsubscribed {removed} handler(s) from {event_type.__qualname__}")
        if emptied:
            logger.debug(f"Removed empty subscriber entry for {event_type.__qualname__}")

    def subscribers_for(self, event_type: type) -> tuple[EventHandler, ...]:
        """
        Returns a snapshot of the handlers subscribed to an event type.

        The snapshot is ordered by ascending priority and is not affected by later changes.

        Args:
            event_type: Exact event class to look up.

        Returns:
            The subscribed handlers, an empty tuple if there are none.
        """
        subscribers = self._subscribers.get(event_type)
        return subscribers.snapshot if subscribers is not None else ()

    def has_subscribers(self, event_type: type) -> bool:
        """Returns True if at least one handler is subscribed to exactly `event_type`."""
        subscribers = self._subscribers.get(event_type)
        return subscribers is not None and bool(subscribers.snapshot)

    def event_types(self) -> list[type]:
        """Returns a snapshot of the event types that currently have subscribers."""
        return [t for t, s in list(self._subscribers.items()) if s.snapshot]

    def _get_or_create(self, event_type: type) -> _SubscriberSet:
        """Returns the live set for `event_type`, creating it exactly once if needed."""
        subscribers = self._subscribers.get(event_type)
        if subscribers is not None and not subscribers.retired:
            return subscribers

        with self._subscribers_lock:
            subscribers = self._subscribers.get(event_type)
            if subscribers is None or subscribers.retired:
                subscribers = _SubscriberSet()
                self._subscribers[event_type] = subscribers
            return subscribers

    # region Listeners

    def register_listener(self, listener: Any) -> bool:
        """
        Records a listener object as registered.

        Args:
            listener: The listener object, compared by identity.

        Returns:
            False if the listener was already registered, True otherwise.
        """
        check_not_none(listener, "listener")
        with self._listeners_lock:
            key = id(listener)
            if key in self._listeners:
                return False
            # Holding the object keeps its id from being recycled while it is tracked
            self._listeners[key] = listener
            return True

    def unregister_listener(self, listener: Any) -> None:
        """Forgets a listener object, does nothing if it was not registered."""
        check_not_none(listener, "listener")
        with self._listeners_lock:
            if self._listeners.get(id(listener)) is listener:
                del self._listeners[id(listener)]

    def is_registered(self, listener: Any) -> bool:
        """Returns True if `listener` is currently registered."""
        with self._listeners_lock:
            return self._listeners.get(id(listener)) is listener
