"""
In-process broadcast of stream events.

The orchestrator publishes StreamEvents to a named channel; hosts subscribe,
optionally filtered to a single stream id. Publishing never awaits a
subscriber, so concurrent calls can publish from their own tasks.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Set

from gateway.models.response import StreamEvent

logger = logging.getLogger(__name__)


class Subscription:
    """Queue-backed view of the channel for one subscriber"""

    def __init__(self, stream_id: Optional[str] = None):
        self.stream_id = stream_id
        self._queue: asyncio.Queue[StreamEvent] = asyncio.Queue()

    def matches(self, event: StreamEvent) -> bool:
        return self.stream_id is None or event.stream_id == self.stream_id

    def put(self, event: StreamEvent) -> None:
        self._queue.put_nowait(event)

    async def get(self) -> StreamEvent:
        return await self._queue.get()

    def __aiter__(self):
        return self

    async def __anext__(self) -> StreamEvent:
        return await self.get()


class EventChannel:
    """Named broadcast channel for StreamEvents"""

    def __init__(self, name: str):
        self.name = name
        self._subscriptions: Set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    async def publish(self, event: StreamEvent) -> None:
        """Deliver an event to every matching subscriber."""
        delivered = 0
        for subscription in list(self._subscriptions):
            if subscription.matches(event):
                subscription.put(event)
                delivered += 1
        if not delivered:
            logger.debug(f"No subscribers on '{self.name}' for stream {event.stream_id}")

    def open(self, stream_id: Optional[str] = None) -> Subscription:
        """Start receiving events, optionally only those of one stream id."""
        subscription = Subscription(stream_id)
        self._subscriptions.add(subscription)
        return subscription

    def close(self, subscription: Subscription) -> None:
        self._subscriptions.discard(subscription)

    @asynccontextmanager
    async def subscribe(self, stream_id: Optional[str] = None) -> AsyncIterator[Subscription]:
        """Subscribe for the duration of the context."""
        subscription = self.open(stream_id)
        try:
            yield subscription
        finally:
            self.close(subscription)
