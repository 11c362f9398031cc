import asyncio
from collections import deque
from typing import Any, Iterable

from .base import MarketDataSource


class StaticSource(MarketDataSource):
    """Replays canned payloads; an Exception in the sequence is raised instead of returned.

    The last item repeats once the sequence is exhausted. ``delay`` simulates
    a slow upstream.
    """

    def __init__(self, payloads: Iterable[Any], delay: float = 0.0) -> None:
        self._payloads = deque(payloads)
        self._delay = delay
        self.calls = 0

    async def fetch(self) -> Any:
        self.calls += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        if not self._payloads:
            raise RuntimeError("StaticSource has no payloads")
        item = self._payloads.popleft() if len(self._payloads) > 1 else self._payloads[0]
        if isinstance(item, BaseException):
            raise item
        return item
