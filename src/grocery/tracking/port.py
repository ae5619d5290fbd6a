"""Tracking channel port: per-order publish/subscribe for live updates."""

from abc import ABC, abstractmethod


class TrackingPort(ABC):
    """Fan-out of order-status and agent-location updates to order watchers.

    Delivery is fire-and-forget. A subscriber only sees messages published
    after it subscribed; nothing is replayed.
    """

    @abstractmethod
    def publish(self, order_id: str, event_type: str, payload: dict) -> int:
        """Send a message to every subscriber of ``order_id``.

        Returns:
            The number of subscribers the message was handed to.
        """
        ...

    @abstractmethod
    def subscribe(self, order_id: str):
        """Register a subscriber and return a handle to pass to ``unsubscribe``."""
        ...

    @abstractmethod
    def unsubscribe(self, order_id: str, subscription) -> None: ...
