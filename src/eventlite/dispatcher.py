"""
Synchronous, priority-ordered event dispatch.

`EventDispatcher` is the public entry point: it registers listener objects (through a
`HandlerDiscovery`), subscribes explicit handlers and dispatches events on the calling thread.

Examples:
    >>> dispatcher = EventDispatcher()
    >>> dispatcher.listen(Ping, lambda event: print("first"), priority=Priority.LOW)
    >>> dispatcher.register(AuditListener())
    >>> cancelled = dispatcher.dispatch(Ping())
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Any, TypeVar

from eventlite._validation import check_event_type
from eventlite._validation import check_not_none
from eventlite.discovery import HandlerDiscovery
from eventlite.discovery import MarkerDiscovery
from eventlite.events import Priority
from eventlite.events import is_cancelled
from eventlite.handlers import CallableHandler
from eventlite.handlers import EventHandler
from eventlite.handlers import report_handler_failure
from eventlite.plugins.manager import create_hook_manager_with_plugins
from eventlite.registry import SubscriberRegistry

logger = logging.getLogger(__name__)

EventT = TypeVar("EventT")

_DEFAULT_DISPATCHER: EventDispatcher | None = None
_DEFAULT_DISPATCHER_LOCK = threading.RLock()


class EventDispatcher:
    """
    Dispatches events to the handlers subscribed to their exact type.

    Dispatch happens synchronously on the calling thread and every operation may be used
    concurrently from several threads. Independent dispatchers share no state, apart from the
    globally registered plugins copied in at construction.

    Args:
        registry (SubscriberRegistry | None): Registry storing the handlers. A new one is created if
            not provided.
        discovery (HandlerDiscovery | None): Collaborator turning listener objects into handlers.
            Defaults to `MarkerDiscovery`, which looks for `@subscribe_event` methods.
        plugins (list[Any] | None): Plugin instances implementing `DispatcherSpec` hooks for this
            dispatcher, in addition to the globally registered ones.
    """

    def __init__(
        self,
        registry: SubscriberRegistry | None = None,
        discovery: HandlerDiscovery | None = None,
        plugins: list[Any] | None = None,
    ) -> None:
        self._registry = registry if registry is not None else SubscriberRegistry()
        self._discovery = discovery if discovery is not None else MarkerDiscovery()
        self._plugin_manager = create_hook_manager_with_plugins(plugins or [])

    @property
    def registry(self) -> SubscriberRegistry:
        return self._registry

    # region Listeners

    def register(self, listener: Any) -> None:
        """
        Registers a listener object and subscribes all of its declared handlers.

        Registering a listener that is already registered does nothing.

        Args:
            listener: The listener instance.

        Raises:
            MissingArgumentError: If `listener` is None.
            TypeError: If `listener` is a class rather than an instance.
            BindingError: If one of the listener's handlers is declared incorrectly. Nothing is
                subscribed in that case.
        """
        check_not_none(listener, "listener")
        if isinstance(listener, type):
            raise TypeError(
                "eventlite expects listeners to be registered as instances. "
                "Have you forgotten the `()` when registering a listener class?"
            )

        if not self._registry.register_listener(listener):
            logger.debug(f"Listener {listener!r} is already registered")
            return

        try:
            bindings = self._discovery.discover(listener)
        except BaseException:
            # Allow registering again once the listener class is fixed
            self._registry.unregister_listener(listener)
            raise

        for event_type, handlers in bindings.items():
            self._registry.subscribe_all(event_type, handlers)

        self._notify("on_listener_registered", listener=listener, event_types=list(bindings))

    def unregister(self, listener: Any) -> None:
        """
        Unregisters a listener object and unsubscribes all of its declared handlers.

        Handlers are recomputed from the listener, unregistering a listener that is not registered
        does nothing.

        Args:
            listener: The listener instance.

        Raises:
            MissingArgumentError: If `listener` is None.
        """
        check_not_none(listener, "listener")
        self._registry.unregister_listener(listener)

        bindings = self._discovery.discover(listener)
        for event_type, handlers in bindings.items():
            self._registry.unsubscribe_all(event_type, handlers)

        self._notify("on_listener_unregistered", listener=listener, event_types=list(bindings))

    def register_all(self, *listeners: Any) -> None:
        """
        Registers each of the given listeners, see `register`.

        `None` entries are skipped, so `register_all(None)` and `register_all()` are no-ops.
        """
        for listener in listeners:
            if listener is not None:
                self.register(listener)

    def unregister_all(self, *listeners: Any) -> None:
        """
        Unregisters each of the given listeners, see `unregister`.

        `None` entries are skipped, so `unregister_all(None)` and `unregister_all()` are no-ops.
        """
        for listener in listeners:
            if listener is not None:
                self.unregister(listener)

    # region Handlers

    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        """Subscribes an explicit handler to an event type, see `SubscriberRegistry.subscribe`."""
        self._registry.subscribe(event_type, handler)

    def unsubscribe(self, event_type: type, handler: EventHandler) -> None:
        """Unsubscribes a handler from an event type, see `SubscriberRegistry.unsubscribe`."""
        self._registry.unsubscribe(event_type, handler)

    def subscribe_all(self, event_type: type, *handlers: EventHandler) -> None:
        """Subscribes several handlers to an event type at once."""
        self._registry.subscribe_all(event_type, handlers)

    def unsubscribe_all(self, event_type: type, *handlers: EventHandler) -> None:
        """Unsubscribes several handlers from an event type at once."""
        self._registry.unsubscribe_all(event_type, handlers)

    def listen(
        self,
        event_type: type[EventT],
        callback: Callable[[EventT], Any],
        priority: int = Priority.NORMAL,
    ) -> CallableHandler[EventT]:
        """
        Subscribes a callable to an event type.

        Args:
            event_type: Exact event class to listen to.
            callback: Callable taking the event as its only argument.
            priority: Handler priority, lower values run first. Defaults to `Priority.NORMAL`.

        Returns:
            The subscribed handler, pass it to `unsubscribe` to stop listening.
        """
        check_event_type(event_type)
        handler = CallableHandler(priority=priority, event_type=event_type, callback=callback)
        self._registry.subscribe(event_type, handler)
        return handler

    def has_subscriber(self, event_type: type) -> bool:
        """Returns True if at least one handler is subscribed to exactly `event_type`."""
        return self._registry.has_subscribers(event_type)

    # region Dispatch

    def dispatch(self, event: Any) -> bool:
        """
        Dispatches an event to the handlers subscribed to its exact type.

        Handlers run in ascending priority order. All of them run even if one cancels the event,
        and a handler raising an exception is logged and skipped. Cancellation is only read once
        every handler has run, so the last `cancel()` or `resume()` call wins.

        Args:
            event: The event to dispatch.

        Returns:
            True if the event supports cancellation and was cancelled, False otherwise (including
            when nothing is subscribed).

        Raises:
            MissingArgumentError: If `event` is None.
        """
        check_not_none(event, "event")

        handlers = self._registry.subscribers_for(type(event))
        if not handlers:
            return False

        self._notify("before_event_dispatch", event=event, handlers=handlers)
        start = time.perf_counter()

        for handler in handlers:
            if handler is None:  # pragma: no cover
                continue
            try:
                handler.invoke(event)
            except Exception as e:
                report_handler_failure(handler, event, e)

        duration = time.perf_counter() - start
        cancelled = is_cancelled(event)
        self._notify(
            "after_event_dispatch",
            event=event,
            handlers=handlers,
            cancelled=cancelled,
            duration=duration,
        )
        return cancelled

    # region Helpers

    def _notify(self, hook_name: str, **kwargs: Any) -> None:
        """Calls a plugin hook, failing plugins are logged and never abort the caller."""
        hook = getattr(self._plugin_manager.hook, hook_name)
        try:
            hook(**kwargs)
        except Exception as e:
            logger.exception(f"Error in plugin hook '{hook_name}': {e}")


def get_default_dispatcher() -> EventDispatcher:
    """
    Get the process-wide default dispatcher (thread-safe).

    The dispatcher is created on first use. Libraries should prefer accepting an explicit
    `EventDispatcher` so that applications and tests can isolate them.
    """
    with _DEFAULT_DISPATCHER_LOCK:
        global _DEFAULT_DISPATCHER
        if _DEFAULT_DISPATCHER is None:
            _DEFAULT_DISPATCHER = EventDispatcher()
        return _DEFAULT_DISPATCHER


def set_default_dispatcher(dispatcher: EventDispatcher | None) -> None:
    """
    Replace the process-wide default dispatcher (thread-safe).

    Args:
        dispatcher: The new default, or None to have a fresh one created on next use.
    """
    with _DEFAULT_DISPATCHER_LOCK:
        global _DEFAULT_DISPATCHER
        _DEFAULT_DISPATCHER = dispatcher
