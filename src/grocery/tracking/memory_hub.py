"""In-process tracking hub backed by asyncio queues."""

import asyncio
from collections import defaultdict, deque
from datetime import datetime

from grocery.settings import TRACKING_HISTORY_SIZE
from grocery.tracking.port import TrackingPort


class Subscription:
    """One watcher of an order. Messages arrive on ``queue``."""

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.loop = loop
        self.queue: asyncio.Queue = asyncio.Queue()

    def deliver(self, message: dict) -> None:
        self.loop.call_soon_threadsafe(self.queue.put_nowait, message)

    async def receive(self) -> dict:
        return await self.queue.get()


class InMemoryTrackingHub(TrackingPort):
    """Hub for a single process. Keeps the most recent published messages for inspection."""

    def __init__(self, history_size: int = TRACKING_HISTORY_SIZE):
        self._subscribers: dict[str, list[Subscription]] = defaultdict(list)
        self.published: deque[dict] = deque(maxlen=history_size)

    def publish(self, order_id: str, event_type: str, payload: dict) -> int:
        message = {
            "event": event_type,
            "order_id": str(order_id),
            "data": payload,
            "published_at": datetime.now().isoformat(),
        }
        self.published.append(message)

        subscribers = list(self._subscribers.get(str(order_id), []))
        for subscription in subscribers:
            subscription.deliver(message)
        return len(subscribers)

    def subscribe(self, order_id: str) -> Subscription:
        subscription = Subscription(asyncio.get_running_loop())
        self._subscribers[str(order_id)].append(subscription)
        return subscription

    def unsubscribe(self, order_id: str, subscription) -> None:
        watchers = self._subscribers.get(str(order_id), [])
        if subscription in watchers:
            watchers.remove(subscription)
        if not watchers:
            self._subscribers.pop(str(order_id), None)

    def subscriber_count(self, order_id: str) -> int:
        return len(self._subscribers.get(str(order_id), []))

    def reset(self):
        self._subscribers.clear()
        self.published.clear()
