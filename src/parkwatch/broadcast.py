"""Snapshot fan-out to live viewers.

Every subscriber owns a bounded queue.  :meth:`BroadcastGateway.publish`
puts the same message on each queue without awaiting anything, so a slow
viewer can never hold up event handling.  When a queue is full its oldest
pending message is dropped; only the newest snapshot matters to a viewer.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Any

from parkwatch._constants import UPDATE_TOPIC
from parkwatch.models.snapshot import LotSnapshot

_logger = logging.getLogger(__name__)

Message = dict[str, Any]


def build_message(snapshot: LotSnapshot, topic: str = UPDATE_TOPIC) -> Message:
    return {"event": topic, "data": snapshot.to_wire()}


class Subscription:
    """One viewer's stream of snapshot messages."""

    def __init__(self, queue_size: int) -> None:
        self.queue: asyncio.Queue[Message | None] = asyncio.Queue(maxsize=queue_size)
        self.dropped = 0

    def offer(self, message: Message | None) -> bool:
        """Enqueue without blocking, evicting the oldest message if full."""
        dropped = False
        while True:
            try:
                self.queue.put_nowait(message)
                return dropped
            except asyncio.QueueFull:
                with contextlib.suppress(asyncio.QueueEmpty):
                    self.queue.get_nowait()
                self.dropped += 1
                dropped = True

    async def next(self) -> Message | None:
        """Wait for the next message; ``None`` means the gateway closed."""
        return await self.queue.get()


class BroadcastGateway:
    """Fan-out of the full lot snapshot to every subscriber.

    Usage::

        gateway = BroadcastGateway()
        sub = gateway.subscribe(store.get())   # current state queued first
        gateway.publish(new_snapshot)
        message = await sub.next()
        gateway.unsubscribe(sub)
    """

    def __init__(self, *, queue_size: int = 64) -> None:
        self._queue_size = queue_size
        self._subscribers: set[Subscription] = set()
        self._listeners: list[Callable[[Message], None]] = []
        self._last_payload: Message | None = None
        self._published = 0
        self._dropped = 0
        self._closed = False

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def last_payload(self) -> Message | None:
        """The most recent message handed to subscribers."""
        return self._last_payload

    @property
    def published(self) -> int:
        return self._published

    @property
    def dropped(self) -> int:
        """Messages evicted from full subscriber queues."""
        return self._dropped

    def subscribe(self, current: LotSnapshot) -> Subscription:
        """Register a viewer; *current* is queued so it never starts empty."""
        subscription = Subscription(self._queue_size)
        if self._closed:
            subscription.offer(None)
            return subscription
        subscription.offer(build_message(current))
        self._subscribers.add(subscription)
        _logger.debug("Subscriber joined (%d active)", len(self._subscribers))
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a viewer.  Safe to call more than once."""
        if subscription in self._subscribers:
            self._subscribers.discard(subscription)
            _logger.debug("Subscriber left (%d active)", len(self._subscribers))

    def add_listener(self, listener: Callable[[Message], None]) -> None:
        """Register a synchronous sink called on every publish."""
        self._listeners.append(listener)

    def publish(self, snapshot: LotSnapshot) -> Message:
        """Push *snapshot* to every subscriber and listener."""
        message = build_message(snapshot)
        self._last_payload = message
        self._published += 1
        if self._closed:
            return message

        for subscription in list(self._subscribers):
            if subscription.offer(message):
                self._dropped += 1
                _logger.debug("Subscriber queue full; dropped oldest snapshot")

        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception:
                _logger.warning("Broadcast listener failed", exc_info=True)
        return message

    def close(self) -> None:
        """Signal every subscriber to stop.  Idempotent."""
        if self._closed:
            return
        self._closed = True
        for subscription in self._subscribers:
            subscription.offer(None)
        self._subscribers.clear()
