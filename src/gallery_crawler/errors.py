"""Error taxonomy for the crawl pipeline.

Every :class:`CrawlError` raised inside a step is reported to the consumer as a
single ``Failed`` outcome. The queues are left as they were, so the next gated
run retries the same stage.
"""


class CrawlError(Exception):
    """Base class for failures of a single crawl step."""


class QueueExhausted(CrawlError):
    """A work queue was popped while empty."""

    def __init__(self, queue: str):
        super().__init__(f"{queue} is empty!")
        self.queue = queue


class NetworkError(CrawlError):
    """Transport failure or unexpected HTTP status."""

    def __init__(self, message: str, url: str, status: int | None = None):
        super().__init__(message)
        self.url = url
        self.status = status


class ParseError(CrawlError):
    """Page content did not have the expected shape."""


class NoEmbeddedData(ParseError):
    """The gallery JSON blob could not be located."""


class MalformedData(ParseError):
    """The gallery JSON blob is invalid or lacks an ``items`` array."""


class ChannelClosed(Exception):
    """The pacing channel was closed; nobody is left on the other side."""
