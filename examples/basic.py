"""Example demonstrating listeners, priorities and cancellation."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from eventlite import Event
from eventlite import EventDispatcher
from eventlite import Priority
from eventlite import cancelable
from eventlite import subscribe_event
from eventlite.plugins import LoggingPlugin


@cancelable
@dataclass
class OrderPlaced(Event):
    order_id: str
    amount: float


class FraudCheck:
    def __init__(self, limit: float) -> None:
        self.limit = limit

    @subscribe_event(priority=Priority.LOWEST)
    def check(self, event: OrderPlaced) -> None:
        if event.amount > self.limit:
            event.cancel()


class Mailer:
    @subscribe_event
    def confirm(self, event: OrderPlaced) -> None:
        if event.cancelled:
            return
        print(f"Order {event.order_id} confirmed")


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    dispatcher = EventDispatcher(plugins=[LoggingPlugin(level=logging.INFO)])
    dispatcher.register_all(FraudCheck(limit=1000), Mailer())
    dispatcher.listen(OrderPlaced, lambda event: print(f"Audit: {event.order_id}"), Priority.HIGHEST)

    for order in [OrderPlaced("A-1", 20.0), OrderPlaced("A-2", 5000.0)]:
        if dispatcher.dispatch(order):
            print(f"Order {order.order_id} was rejected")


if __name__ == "__main__":
    main()
