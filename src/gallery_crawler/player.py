"""Headless consumer of crawl outcomes.

Stands in for a display surface: it keeps the latest image and error,
re-arms the scheduler in manual mode and optionally writes images to disk.
"""

import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

from .crawl import GalleryCrawler
from .outcome import PROGRESS_DONE, Completed, Failed, FetchOutcome, Progress
from .scheduler import PacingScheduler

logger = logging.getLogger(__name__)


def image_filename(url: str) -> str:
    """Last path segment of an image URL."""
    name = url.rstrip("/").rsplit("/", 1)[-1]
    return name or "image"


class Player:
    def __init__(
        self,
        scheduler: PacingScheduler,
        output_dir: str | Path | None = None,
        limit: int | None = None,
        prompt: Callable[[], Awaitable[object]] | None = None,
    ):
        self.scheduler = scheduler
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self.limit = limit
        self.prompt = prompt

        self.progress = 0.0
        self.image_url: str | None = None
        self.image_data: bytes | None = None
        self.error: str | None = None
        self.finished = 0
        self.history: list[FetchOutcome] = []

    def handle(self, outcome: FetchOutcome):
        """Update display state from one outcome."""
        self.history.append(outcome)
        if isinstance(outcome, Progress):
            self.progress = outcome.percent
        elif isinstance(outcome, Completed):
            self.error = None
            self.progress = PROGRESS_DONE
            self.image_url = outcome.url
            self.image_data = outcome.content
            if self.output_dir is not None:
                self.save()
        elif isinstance(outcome, Failed):
            self.error = outcome.message
            # stop auto-advancing until the next manual trigger
            self.scheduler.set_auto_play(False)

    def save(self) -> Path | None:
        """Write the current image to the output directory."""
        if self.image_url is None or self.image_data is None or self.output_dir is None:
            logger.warning("Couldn't save the photo.")
            return None

        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / image_filename(self.image_url)
        logger.info("Saving file: %s", path)
        path.write_bytes(self.image_data)
        return path

    @property
    def done(self) -> bool:
        return self.limit is not None and self.finished >= self.limit

    async def consume(self, crawler: GalleryCrawler):
        """Drain the crawler's outcome stream until the limit is reached."""
        stream = crawler.outcomes()
        try:
            async for outcome in stream:
                self.handle(outcome)
                if not outcome.terminal:
                    continue

                self.finished += 1
                if self.done:
                    break
                if self.scheduler.auto_play:
                    continue
                if self.prompt is not None:
                    await self.prompt()
                elif isinstance(outcome, Failed):
                    # nobody to trigger a retry
                    break
                self.scheduler.request_next()
        finally:
            await stream.aclose()
            self.scheduler.stop()
            if crawler.channel is not None:
                await crawler.channel.close()
