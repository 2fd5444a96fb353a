"""Pacing scheduler: turns manual and timed triggers into advance requests."""

import asyncio
import logging

from .errors import ChannelClosed
from .pacing import AdvanceRequest, PacingChannel

logger = logging.getLogger(__name__)

MANUAL = "manual"
TIMER = "timer"


class PacingScheduler:
    """Emits one :class:`AdvanceRequest` per trigger.

    A trigger is either a manual request (``request_next``) or, while
    auto-play is enabled, the expiry of ``interval`` seconds. Changes to
    auto-play or the interval restart the current wait.
    """

    def __init__(
        self,
        channel: PacingChannel,
        auto_play: bool = False,
        interval: float = 5.0,
        play_next: bool = True,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.channel = channel
        self.auto_play = auto_play
        self.interval = interval
        self._manual_pending = play_next
        self._stopped = False
        self._wakeup = asyncio.Event()
        self.sent = 0

    def request_next(self):
        """Ask for one advance as soon as possible."""
        self._manual_pending = True
        self._wakeup.set()

    def set_auto_play(self, auto_play: bool):
        self.auto_play = auto_play
        self._wakeup.set()

    def set_interval(self, interval: float):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self._wakeup.set()

    def stop(self):
        """Make ``run`` return after its current wait."""
        self._stopped = True
        self._wakeup.set()

    async def _next_trigger(self) -> str | None:
        """Wait for the next trigger. Returns its source, or None once stopped."""
        while True:
            self._wakeup.clear()
            if self._stopped:
                return None
            if self._manual_pending:
                self._manual_pending = False
                return MANUAL

            timeout = self.interval if self.auto_play else None
            try:
                await asyncio.wait_for(self._wakeup.wait(), timeout)
            except asyncio.TimeoutError:
                if self.auto_play and not self._stopped:
                    return TIMER

    async def run(self):
        """Send advance requests until stopped. A closed channel is fatal."""
        while True:
            source = await self._next_trigger()
            if source is None:
                logger.debug("Scheduler stopped after %d requests", self.sent)
                return

            try:
                await self.channel.send(AdvanceRequest(source=source))
            except ChannelClosed:
                if self._stopped:
                    return
                logger.error("Pacing channel closed, scheduler giving up")
                raise

            self.sent += 1
            if source == TIMER:
                logger.debug("Sent a play-next request after waiting %.2fs", self.interval)
            else:
                logger.debug("Sent a play-next request.")
