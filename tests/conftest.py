"""Shared fixtures: an in-memory site served through httpx.MockTransport."""

import json

import httpx
import pytest

from gallery_crawler.core import HttpFetcher


def listing_html(links: list[str]) -> str:
    cards = "\n".join(
        f'''<div class="slot type-post">
              <article class="post card type-post">
                <a class="card-img-link" itemprop="image" href="{link}"><img src="/thumb.jpg"></a>
              </article>
            </div>'''
        for link in links
    )
    return f"""
    <html><body>
      <div class="sidebar"><a class="card-img-link" itemprop="image" href="https://example.com/ad/">Ad</a></div>
      <div class="main-column"><div class="cards-content">{cards}</div></div>
    </body></html>
    """


def gallery_html(images: list[str], marker: str = "CHIVE_GALLERY_ITEMS") -> str:
    items = [{"type": "attachment", "html": f'<figure><img src="{src}"></figure>'} for src in images]
    blob = json.dumps({"items": items, "meta": {"count": len(items)}})
    return f"<html><head><script>window.{marker} = {blob};</script></head><body></body></html>"


class FakeSite:
    """Routes URLs to canned responses and records every request."""

    def __init__(self):
        self.routes: dict[str, tuple[int, bytes] | None] = {}
        self.calls: list[str] = []

    def html(self, url: str, body: str, status: int = 200):
        self.routes[url] = (status, body.encode("utf-8"))

    def binary(self, url: str, content: bytes, status: int = 200):
        self.routes[url] = (status, content)

    def fail(self, url: str):
        self.routes[url] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)
        if url not in self.routes:
            return httpx.Response(404, text="not found")
        route = self.routes[url]
        if route is None:
            raise httpx.ConnectError("connection refused", request=request)
        status, content = route
        return httpx.Response(status, content=content)

    def fetcher(self) -> HttpFetcher:
        return HttpFetcher(timeout=5.0, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def site():
    return FakeSite()


@pytest.fixture
async def fetcher(site):
    fetcher = site.fetcher()
    yield fetcher
    await fetcher.close()
