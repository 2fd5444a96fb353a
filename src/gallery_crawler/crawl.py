"""Gated four-stage crawl: listing page, gallery sub-page, image."""

import asyncio
import enum
import logging
import random
import time
from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from .config import CrawlerSettings, settings as default_settings
from .core import Fetcher, HttpFetcher, Response
from .errors import ChannelClosed, CrawlError, NetworkError
from .frontier import WorkQueue
from .outcome import (
    PROGRESS_IDLE,
    PROGRESS_PAGE,
    PROGRESS_SUB_PAGE,
    Completed,
    Failed,
    FetchOutcome,
    Progress,
)
from .pacing import PacingChannel
from .parser import GALLERY_MARKER, listing_pages, parse_listing_page, parse_sub_page

logger = logging.getLogger(__name__)


class Stage(enum.Enum):
    IDLE = "idle"
    PAGE = "page"
    SUB_PAGE = "sub_page"
    IMAGE = "image"


@dataclass
class CrawlSession:
    """Mutable state carried between steps of one crawler."""

    pages: WorkQueue = field(default_factory=lambda: WorkQueue("Pages"))
    sub_pages: WorkQueue = field(default_factory=lambda: WorkQueue("SubPages"))
    images: WorkQueue = field(default_factory=lambda: WorkQueue("Images"))
    stage: Stage = Stage.IDLE
    running: bool = False

    def sizes(self) -> tuple[int, int, int]:
        return len(self.pages), len(self.sub_pages), len(self.images)


class GalleryCrawler:
    """Resumable crawl state machine.

    Every ``step`` performs at most one fetch and moves one stage forward.
    ``outcomes`` runs steps only after an advance request has been received.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        channel: PacingChannel | None = None,
        listing_url: str = default_settings.listing_url,
        total_pages: int = default_settings.total_pages,
        marker: str = GALLERY_MARKER,
        rng: random.Random | None = None,
        session: CrawlSession | None = None,
    ):
        self.fetcher = fetcher
        self.channel = channel
        self.listing_url = listing_url
        self.total_pages = total_pages
        self.marker = marker
        self.rng = rng or random.Random()
        self.session = session or CrawlSession()

    @property
    def stage(self) -> Stage:
        return self.session.stage

    async def _get(self, url: str) -> Response:
        try:
            response = await self.fetcher.fetch(url)
        except httpx.HTTPError as e:
            raise NetworkError(f"{type(e).__name__}: {e} ({url})", url) from e
        if not response.ok:
            raise NetworkError(f"Http status: {response.status}, {url}", url, response.status)
        return response

    async def _consume(self, queue: WorkQueue, handle: Callable[[Response], list[str] | bytes]):
        """
        Fetch the top URL of ``queue`` and run ``handle`` on the response.

        The URL is popped only once both succeed, so a failed step leaves the
        queue exactly as it was.
        """
        url = queue.peek()
        result = handle(await self._get(url))
        queue.pop()
        return url, result

    async def _advance(self) -> FetchOutcome:
        session = self.session
        start = time.monotonic()

        if session.stage is Stage.IDLE:
            if not session.pages:
                session.pages.refill(listing_pages(self.listing_url, self.total_pages), self.rng)
            session.stage = Stage.PAGE
            return Progress(PROGRESS_IDLE)

        if session.stage is Stage.PAGE:
            if not session.sub_pages:
                page, sub_pages = await self._consume(
                    session.pages, lambda r: parse_listing_page(r.text)
                )
                if not sub_pages:
                    logger.warning("No sub-pages found on %s", page)
                session.sub_pages.refill(sub_pages, self.rng)
                logger.info(
                    "Time: %d, SubPages: %d, Page: %s",
                    (time.monotonic() - start) * 1000, len(session.sub_pages), page,
                )
            session.stage = Stage.SUB_PAGE
            return Progress(PROGRESS_PAGE)

        if session.stage is Stage.SUB_PAGE:
            if not session.images:
                sub_page, images = await self._consume(
                    session.sub_pages, lambda r: parse_sub_page(r.text, self.marker)
                )
                session.images.refill(images, self.rng)
                logger.info(
                    "Time: %d, Images: %d, SubPage: %s",
                    (time.monotonic() - start) * 1000, len(session.images), sub_page,
                )
            session.stage = Stage.IMAGE
            return Progress(PROGRESS_SUB_PAGE)

        image, content = await self._consume(session.images, lambda r: r.content)
        logger.info("Time: %d, Image: %s", (time.monotonic() - start) * 1000, image)
        session.stage = Stage.IDLE
        return Completed(content, image)

    async def step(self) -> FetchOutcome:
        """Advance one stage. Crawl errors become ``Failed``; the stage is kept."""
        try:
            return await self._advance()
        except CrawlError as e:
            logger.warning("Failed to download: %s", e)
            return Failed(str(e))

    async def outcomes(self) -> AsyncGenerator[FetchOutcome, None]:
        """Yield outcomes of gated cycles until the pacing channel closes."""
        if self.channel is None:
            raise RuntimeError("GalleryCrawler.outcomes() needs a pacing channel")

        session = self.session
        while True:
            if not session.running:
                try:
                    request = await self.channel.receive()
                except ChannelClosed:
                    logger.info("Pacing channel closed, crawler stopping.")
                    return
                logger.info("Received %s request to download photo.", request.source)
                session.running = True
                session.stage = Stage.IDLE

            outcome = await self.step()
            if outcome.terminal:
                session.running = False
                logger.info("Pages: %d, SubPages: %d, Images: %d", *session.sizes())
            yield outcome


async def run_session(
    config: CrawlerSettings,
    count: int | None = None,
    output_dir: str | Path | None = None,
    prompt=None,
) -> list[FetchOutcome]:
    """Wire fetcher, channel, scheduler, crawler and player together and run them."""
    from .player import Player
    from .scheduler import PacingScheduler

    fetcher = HttpFetcher(
        timeout=config.timeout,
        user_agent=config.user_agent,
        proxy=config.proxy,
    )
    channel = PacingChannel()
    scheduler = PacingScheduler(channel, auto_play=config.auto_play, interval=config.interval)
    crawler = GalleryCrawler(
        fetcher,
        channel,
        listing_url=config.listing_url,
        total_pages=config.total_pages,
        marker=config.gallery_marker,
    )
    player = Player(scheduler, output_dir=output_dir, limit=count, prompt=prompt)

    try:
        await asyncio.gather(scheduler.run(), player.consume(crawler))
    finally:
        await fetcher.close()
    return player.history
