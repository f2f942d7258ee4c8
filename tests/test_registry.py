"""Tests for SubscriberRegistry."""

import pytest

from eventlite import Event
from eventlite import SubscriberRegistry
from eventlite import handler
from eventlite.exceptions import BindingError
from eventlite.exceptions import MissingArgumentError


class Ping(Event):
    pass


class Pong(Event):
    pass


def noop(event) -> None:  # pragma: no cover
    pass


def make(priority: int, label: str):
    """Builds a distinct handler tagged with a label for readable assertions."""

    def callback(event) -> None:  # pragma: no cover
        pass

    callback.__qualname__ = label
    return handler(callback, priority=priority)


def names(registry: SubscriberRegistry, event_type: type) -> list[str]:
    return [h.name for h in registry.subscribers_for(event_type)]


class TestSubscribe:
    """Tests for subscribe and subscribe_all."""

    def test_subscribe_creates_entry(self) -> None:
        """Subscribing to a new event type creates its entry."""
        registry = SubscriberRegistry()
        assert not registry.has_subscribers(Ping)

        registry.subscribe(Ping, handler(noop))

        assert registry.has_subscribers(Ping)
        assert not registry.has_subscribers(Pong)
        assert registry.event_types() == [Ping]

    def test_sorted_by_ascending_priority(self) -> None:
        """Handlers are kept sorted by ascending priority."""
        registry = SubscriberRegistry()
        registry.subscribe(Ping, make(1, "high"))
        registry.subscribe(Ping, make(-2, "lowest"))
        registry.subscribe(Ping, make(0, "normal"))

        assert names(registry, Ping) == ["lowest", "normal", "high"]

    def test_ties_keep_insertion_order(self) -> None:
        """Handlers with equal priorities keep the order they were subscribed in."""
        registry = SubscriberRegistry()
        registry.subscribe(Ping, make(0, "a"))
        registry.subscribe_all(Ping, [make(1, "x"), make(0, "b"), make(0, "c")])
        registry.subscribe(Ping, make(0, "d"))

        assert names(registry, Ping) == ["a", "b", "c", "d", "x"]

    def test_duplicates_are_kept(self) -> None:
        """Subscribing the same handler twice stores it twice."""
        registry = SubscriberRegistry()
        ping_handler = handler(noop)
        registry.subscribe(Ping, ping_handler)
        registry.subscribe(Ping, ping_handler)

        assert registry.subscribers_for(Ping) == (ping_handler, ping_handler)

    def test_subscribe_all_empty_does_not_create_entry(self) -> None:
        """Subscribing no handlers leaves the registry untouched."""
        registry = SubscriberRegistry()
        registry.subscribe_all(Ping, [])
        assert not registry.has_subscribers(Ping)
        assert registry.event_types() == []

    def test_incompatible_handler_rejected(self) -> None:
        """Handlers declaring another event type cannot be subscribed, atomically."""
        registry = SubscriberRegistry()
        with pytest.raises(BindingError):
            registry.subscribe_all(Pong, [handler(noop), handler(noop, event_type=Ping)])
        assert not registry.has_subscribers(Pong)

    def test_invalid_arguments(self) -> None:
        """None arguments, non-class keys and non-handlers are rejected."""
        registry = SubscriberRegistry()
        with pytest.raises(MissingArgumentError):
            registry.subscribe(None, handler(noop))  # type: ignore[arg-type]
        with pytest.raises(MissingArgumentError):
            registry.subscribe(Ping, None)  # type: ignore[arg-type]
        with pytest.raises(MissingArgumentError):
            registry.subscribe_all(Ping, None)  # type: ignore[arg-type]
        with pytest.raises(TypeError, match="must be classes"):
            registry.subscribe("Ping", handler(noop))  # type: ignore[arg-type]
        with pytest.raises(TypeError, match="Expected an EventHandler"):
            registry.subscribe(Ping, noop)  # type: ignore[arg-type]


class TestUnsubscribe:
    """Tests for unsubscribe and unsubscribe_all."""

    def test_unsubscribe_removes_handler(self) -> None:
        """Unsubscribed handlers are removed, the others keep their order."""
        registry = SubscriberRegistry()
        first, second, third = make(0, "first"), make(1, "second"), make(2, "third")
        registry.subscribe_all(Ping, [first, second, third])

        registry.unsubscribe(Ping, second)

        assert names(registry, Ping) == ["first", "third"]

    def test_unsubscribe_removes_one_occurrence(self) -> None:
        """Each unsubscribe removes a single occurrence of a duplicated handler."""
        registry = SubscriberRegistry()
        ping_handler = handler(noop)
        registry.subscribe_all(Ping, [ping_handler, ping_handler])

        registry.unsubscribe(Ping, ping_handler)
        assert registry.subscribers_for(Ping) == (ping_handler,)

        registry.unsubscribe(Ping, ping_handler)
        assert registry.subscribers_for(Ping) == ()

    def test_unsubscribe_by_equality(self) -> None:
        """An equal handler instance is enough to unsubscribe."""
        registry = SubscriberRegistry()
        registry.subscribe(Ping, handler(noop, priority=3))

        registry.unsubscribe(Ping, handler(noop, priority=3))

        assert not registry.has_subscribers(Ping)

    def test_last_unsubscribe_drops_entry(self) -> None:
        """Removing the last handler removes the event type entry."""
        registry = SubscriberRegistry()
        ping_handler = handler(noop)
        registry.subscribe(Ping, ping_handler)

        registry.unsubscribe(Ping, ping_handler)

        assert not registry.has_subscribers(Ping)
        assert registry.event_types() == []
        assert Ping not in registry._subscribers

    def test_resubscribe_after_drop_starts_fresh(self) -> None:
        """A new subscription after the entry was dropped starts a new, independent set."""
        registry = SubscriberRegistry()
        ping_handler = handler(noop)
        registry.subscribe(Ping, ping_handler)
        old_set = registry._subscribers[Ping]
        registry.unsubscribe(Ping, ping_handler)

        registry.subscribe(Ping, ping_handler)

        assert registry._subscribers[Ping] is not old_set
        assert registry.subscribers_for(Ping) == (ping_handler,)

    def test_unsubscribe_missing_handler_is_noop(self) -> None:
        """Unsubscribing an unknown handler leaves existing subscribers untouched."""
        registry = SubscriberRegistry()
        ping_handler = handler(noop)
        registry.subscribe(Ping, ping_handler)

        registry.unsubscribe(Ping, make(0, "never subscribed"))
        registry.unsubscribe(Pong, ping_handler)

        assert registry.subscribers_for(Ping) == (ping_handler,)

    def test_unsubscribe_all(self) -> None:
        """unsubscribe_all removes each listed handler, ignoring unknown ones."""
        registry = SubscriberRegistry()
        first, second = make(0, "first"), make(0, "second")
        registry.subscribe_all(Ping, [first, second])

        registry.unsubscribe_all(Ping, [second, make(0, "unknown"), first])

        assert not registry.has_subscribers(Ping)

    def test_multiset_semantics(self) -> None:
        """Survivors are exactly subscribed minus unsubscribed, still sorted."""
        registry = SubscriberRegistry()
        a, b, c = make(2, "a"), make(-1, "b"), make(2, "c")
        for h in [a, b, a, c, b]:
            registry.subscribe(Ping, h)
        for h in [a, b]:
            registry.unsubscribe(Ping, h)

        assert registry.subscribers_for(Ping) == (b, a, c)


class TestSnapshots:
    """Tests for subscribers_for snapshots."""

    def test_empty_for_unknown_type(self) -> None:
        """Unknown event types have no subscribers."""
        assert SubscriberRegistry().subscribers_for(Ping) == ()

    def test_snapshot_unaffected_by_later_changes(self) -> None:
        """A snapshot keeps its content while the registry changes."""
        registry = SubscriberRegistry()
        first, second = make(0, "first"), make(1, "second")
        registry.subscribe(Ping, first)

        snapshot = registry.subscribers_for(Ping)
        registry.subscribe(Ping, second)
        registry.unsubscribe(Ping, first)

        assert snapshot == (first,)
        assert registry.subscribers_for(Ping) == (second,)

    def test_exact_type_lookup(self) -> None:
        """Lookups do not consider subclasses or base classes."""

        class LoudPing(Ping):
            pass

        registry = SubscriberRegistry()
        registry.subscribe(Ping, handler(noop))

        assert registry.subscribers_for(LoudPing) == ()
        assert not registry.has_subscribers(Event)


class TestListeners:
    """Tests for listener identity tracking."""

    def test_register_listener_once(self) -> None:
        """A listener can only be registered once until it is unregistered."""
        registry = SubscriberRegistry()
        listener = object()

        assert registry.register_listener(listener) is True
        assert registry.register_listener(listener) is False
        assert registry.is_registered(listener)

        registry.unregister_listener(listener)
        assert not registry.is_registered(listener)
        assert registry.register_listener(listener) is True

    def test_tracking_uses_identity(self) -> None:
        """Equal but distinct listeners are tracked separately."""

        class Same:
            def __eq__(self, other: object) -> bool:
                return isinstance(other, Same)

            def __hash__(self) -> int:
                return 1

        registry = SubscriberRegistry()
        assert registry.register_listener(Same())
        assert registry.register_listener(Same())

    def test_unregister_unknown_listener_is_noop(self) -> None:
        """Unregistering a listener twice or never registered does nothing."""
        registry = SubscriberRegistry()
        registry.unregister_listener(object())

        listener = object()
        registry.register_listener(listener)
        registry.unregister_listener(listener)
        registry.unregister_listener(listener)
        assert not registry.is_registered(listener)

    def test_missing_listener(self) -> None:
        """None listeners are rejected."""
        registry = SubscriberRegistry()
        with pytest.raises(MissingArgumentError):
            registry.register_listener(None)
        with pytest.raises(MissingArgumentError):
            registry.unregister_listener(None)
