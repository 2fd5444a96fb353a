"""Pacing channel between the scheduler and the crawler."""

import asyncio
import enum
from collections import deque
from dataclasses import dataclass

from .errors import ChannelClosed


class Intent(enum.Enum):
    ADVANCE = "advance"


@dataclass(frozen=True)
class AdvanceRequest:
    """One complete request to run a crawl cycle."""

    intent: Intent = Intent.ADVANCE
    source: str = "manual"


class PacingChannel:
    """Bounded channel of advance requests.

    Senders block while the channel is full. Receivers are serialised by a
    lock so only one consumer drains it at a time. Closing wakes everybody
    waiting on either side with :class:`ChannelClosed`.
    """

    def __init__(self, capacity: int = 1):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._items: deque[AdvanceRequest] = deque()
        self._cond = asyncio.Condition()
        self._receive_lock = asyncio.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def pending(self) -> int:
        return len(self._items)

    async def send(self, request: AdvanceRequest | None = None) -> None:
        """Send one request, waiting for room if the channel is full."""
        async with self._cond:
            await self._cond.wait_for(lambda: self._closed or len(self._items) < self.capacity)
            if self._closed:
                raise ChannelClosed("pacing channel is closed")
            self._items.append(request or AdvanceRequest())
            self._cond.notify_all()

    async def receive(self) -> AdvanceRequest:
        """Wait for the next complete advance request."""
        async with self._receive_lock:
            async with self._cond:
                await self._cond.wait_for(lambda: self._closed or bool(self._items))
                if self._closed:
                    raise ChannelClosed("pacing channel is closed")
                request = self._items.popleft()
                self._cond.notify_all()
                return request

    async def close(self) -> None:
        """Close the channel and discard pending requests."""
        async with self._cond:
            self._closed = True
            self._items.clear()
            self._cond.notify_all()
