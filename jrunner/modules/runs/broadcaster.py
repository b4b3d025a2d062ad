"""Per-run fan-out of output events to live subscribers."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, AsyncIterator, Iterable, Optional

if TYPE_CHECKING:
    from .models import RunEvent

logger = logging.getLogger(__name__)


class Subscription:
    """One listener attached to a run channel.

    Events are queued without bound and iteration stops after the ``end``
    event.
    """

    def __init__(self, channel: "RunChannel") -> None:
        self._channel = channel
        self._queue: asyncio.Queue[RunEvent] = asyncio.Queue()
        self._finished = False

    def deliver(self, event: RunEvent) -> None:
        self._queue.put_nowait(event)

    async def get(self) -> RunEvent:
        event = await self._queue.get()
        if event.is_end:
            self._finished = True
        return event

    @property
    def finished(self) -> bool:
        return self._finished

    def close(self) -> None:
        self._channel.unsubscribe(self)

    async def __aiter__(self) -> AsyncIterator[RunEvent]:
        while not self._finished:
            yield await self.get()


class RunChannel:
    """Broadcasts a run's events, in production order, to every subscriber."""

    def __init__(self) -> None:
        self._subscribers: list[Subscription] = []
        self._end: Optional[RunEvent] = None

    @property
    def closed(self) -> bool:
        return self._end is not None

    @property
    def listener_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, backlog: Iterable[RunEvent] = ()) -> Subscription:
        """Attach a listener, replaying ``backlog`` before any live event."""
        subscription = Subscription(self)
        for event in backlog:
            subscription.deliver(event)
        if self.closed:
            subscription.deliver(self._end)
        else:
            self._subscribers.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscribers:
            self._subscribers.remove(subscription)

    def publish(self, event: RunEvent) -> None:
        if self.closed:
            raise RuntimeError("cannot publish on a closed run channel")
        for subscription in list(self._subscribers):
            subscription.deliver(event)

    def close(self, end: RunEvent) -> None:
        if self.closed:
            return
        self._end = end
        for subscription in self._subscribers:
            subscription.deliver(end)
        logger.debug("Run channel closed with %d listener(s)", len(self._subscribers))
        self._subscribers.clear()
