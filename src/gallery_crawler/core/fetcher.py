"""HTTP fetcher implementation using httpx."""

import asyncio
import logging

import httpx

from .protocols import Response

DEFAULT_USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.14; rv:68.0) Gecko/20100101 Firefox/68.0"

logger = logging.getLogger(__name__)


class HttpFetcher:
    """Async HTTP fetcher sharing one client, cookie jar and proxy across requests."""

    def __init__(
        self,
        timeout: float | None = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        proxy: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = httpx.Timeout(timeout)
        self.user_agent = user_agent
        self.proxy = proxy
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client with double-checked locking."""
        if self._client is None:
            async with self._lock:
                if self._client is None:
                    logger.info("Initializing http client, using proxy: %s", self.proxy or "no")
                    self._client = httpx.AsyncClient(
                        timeout=self.timeout,
                        headers={"User-Agent": self.user_agent},
                        proxy=self.proxy,
                        transport=self._transport,
                        follow_redirects=True,
                    )
        return self._client

    async def fetch(self, url: str) -> Response:
        """Fetch a URL and return the response."""
        client = await self._get_client()
        resp = await client.get(url)
        return Response(
            url=str(resp.url),
            status=resp.status_code,
            content=resp.content,
            headers=dict(resp.headers),
        )

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
