"""In-process change feed for the local backend.

Committed row changes are published once and fanned out to every open
subscription whose equality filters match the row. Each subscription owns
a single inbound queue, consumed with ``async for``.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Optional

from app.models import ChangeEvent
from app.services.exceptions import SubscriptionError

logger = logging.getLogger(__name__)

# Marks the end of a subscription's stream
_CLOSED = object()


class FeedSubscription:
    """Handle for one filtered subscription.

    Consumers iterate the handle and call ``task_done()`` after each event
    they finish applying, so ``join()`` can wait for the backlog to drain.
    """

    def __init__(self, table: str, filters: dict[str, Any]):
        self.table = table
        self.filters = dict(filters)
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, event: ChangeEvent) -> None:
        if self._closed:
            return
        self._queue.put_nowait(event)

    def fail(self, error: Optional[Exception] = None) -> None:
        """Drop the subscription with an error the consumer will see."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(error or SubscriptionError("Change stream disconnected"))

    def stop(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    def task_done(self) -> None:
        self._queue.task_done()

    async def join(self) -> None:
        await self._queue.join()

    def __aiter__(self):
        return self

    async def __anext__(self) -> ChangeEvent:
        item = await self._queue.get()
        if item is _CLOSED:
            self._queue.task_done()
            raise StopAsyncIteration
        if isinstance(item, Exception):
            self._queue.task_done()
            raise item
        return item


class ChangeFeed:
    """Fan-out of committed changes to filtered subscriptions."""

    def __init__(self):
        self._subscriptions: dict[str, list[FeedSubscription]] = defaultdict(list)

    def subscribe(self, table: str, filters: dict[str, Any]) -> FeedSubscription:
        handle = FeedSubscription(table, filters)
        self._subscriptions[table].append(handle)
        logger.debug("Subscribed to %s with %s", table, filters)
        return handle

    def unsubscribe(self, handle: FeedSubscription) -> None:
        handle.stop()
        subscribers = self._subscriptions.get(handle.table, [])
        if handle in subscribers:
            subscribers.remove(handle)
            logger.debug("Unsubscribed from %s with %s", handle.table, handle.filters)

    def subscriber_count(self, table: str) -> int:
        return len(self._subscriptions.get(table, []))

    def publish(self, event: ChangeEvent) -> None:
        """Deliver a committed change to every matching subscription."""
        for handle in list(self._subscriptions.get(event.table, [])):
            if event.matches(handle.filters):
                handle.deliver(event)

    def disconnect_all(self, table: Optional[str] = None) -> None:
        """Drop subscriptions as a lost connection would."""
        tables = [table] if table else list(self._subscriptions)
        for name in tables:
            for handle in self._subscriptions.pop(name, []):
                handle.fail()
