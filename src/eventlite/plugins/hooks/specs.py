"""Hook specifications for eventlite dispatch lifecycle events."""

from typing import Any

from eventlite.handlers import EventHandler
from eventlite.plugins.hooks.markers import hook_spec


class DispatcherSpec:
    """Hook specifications for events flowing through an `EventDispatcher`."""

    @hook_spec
    def before_event_dispatch(self, event: Any, handlers: tuple[EventHandler, ...]) -> None:
        """
        Called before the handlers of an event are invoked.

        Not called for events without subscribers.

        Args:
            event: The event being dispatched.
            handlers: Snapshot of the handlers about to be invoked, in invocation order.
        """

    @hook_spec
    def after_event_dispatch(
        self,
        event: Any,
        handlers: tuple[EventHandler, ...],
        cancelled: bool,
        duration: float,
    ) -> None:
        """
        Called after every handler of an event has run.

        Args:
            event: The dispatched event.
            handlers: Snapshot of the handlers that were invoked.
            cancelled: The value returned by `dispatch`.
            duration: Time taken to run all handlers, in seconds.
        """

    @hook_spec
    def on_listener_registered(self, listener: Any, event_types: list[type]) -> None:
        """
        Called after a listener object has been registered.

        Args:
            listener: The registered listener.
            event_types: Event types the listener's handlers were subscribed to.
        """

    @hook_spec
    def on_listener_unregistered(self, listener: Any, event_types: list[type]) -> None:
        """
        Called after a listener object has been unregistered.

        Args:
            listener: The unregistered listener.
            event_types: Event types the listener's handlers were unsubscribed from.
        """
