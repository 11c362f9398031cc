"""Fan-out of published snapshots to streaming consumers."""
from __future__ import annotations

import asyncio
from typing import Callable, Optional

from ..models import Snapshot

# Only the newest snapshot matters to a consumer; one spare slot absorbs a publish mid-send.
SUBSCRIBER_QUEUE_SIZE = 2


class Subscription:
    """Queue of snapshots for one consumer. Close it to stop receiving."""

    def __init__(self, owner: "SnapshotBroadcast") -> None:
        self._owner = owner
        self._queue: asyncio.Queue[Snapshot] = asyncio.Queue(maxsize=SUBSCRIBER_QUEUE_SIZE)
        self.closed = False

    def offer(self, snapshot: Snapshot) -> None:
        if self._queue.full():
            # Slow consumer: replace the backlog with the newest snapshot.
            while not self._queue.empty():
                self._queue.get_nowait()
        self._queue.put_nowait(snapshot)

    async def get(self) -> Snapshot:
        return await self._queue.get()

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._owner._subscribers.discard(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> Snapshot:
        if self.closed:
            raise StopAsyncIteration
        return await self.get()


class SnapshotBroadcast:
    """Deliver each published snapshot to every open subscription.

    ``current`` returns the snapshot a new subscriber should see first; the
    refresh loop passes its own published reference, so the broadcast keeps
    no copy of its own.
    """

    def __init__(self, current: Optional[Callable[[], Optional[Snapshot]]] = None) -> None:
        self._current = current or (lambda: None)
        self._subscribers: set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, snapshot: Snapshot) -> None:
        for subscription in list(self._subscribers):
            subscription.offer(snapshot)

    def subscribe(self) -> Subscription:
        subscription = Subscription(self)
        self._subscribers.add(subscription)
        latest = self._current()
        if latest is not None:
            subscription.offer(latest)
        return subscription
