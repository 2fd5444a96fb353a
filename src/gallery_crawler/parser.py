"""Listing and gallery page parsing with selectolax.

All functions here are pure: they take page content and return URLs in
document order. Shuffling is left to the work queues.
"""

import json
import logging
from urllib.parse import urlsplit

from selectolax.parser import HTMLParser

from .errors import MalformedData, NoEmbeddedData

logger = logging.getLogger(__name__)

GALLERY_MARKER = "CHIVE_GALLERY_ITEMS"

CARD_LINK_SELECTOR = (
    "div.main-column div.cards-content div.slot.type-post "
    'article.post.card.type-post a.card-img-link[itemprop="image"]'
)

GIF_TYPE = "gif"
GIF_SRC_ATTR = "data-gifsrc"
DEFAULT_ITEM_HTML = "<figure />"
DEFAULT_ITEM_TYPE = "attachment"


def listing_pages(base_url: str, total: int) -> list[str]:
    """Build the URLs of listing pages 1..total."""
    base_url = base_url.rstrip("/")
    logger.info("Initializing pages from 1 to %d", total)
    return [
        f"{base_url}/" if i == 1 else f"{base_url}/page/{i}/"
        for i in range(1, total + 1)
    ]


def parse_listing_page(html: str) -> list[str]:
    """Extract sub-page links from the cards of a listing page."""
    tree = HTMLParser(html)
    links = []
    for node in tree.css(CARD_LINK_SELECTOR):
        href = node.attributes.get("href")
        if href:
            links.append(href)
    return links


def find_balanced_json(text: str, marker: str = GALLERY_MARKER) -> str | None:
    """
    Return the JSON object that follows ``marker`` in ``text``.

    Scans from the first ``{`` after the marker and counts brace depth until
    it returns to zero. Braces inside string literals are not counted.
    """
    idx = text.find(marker)
    if idx < 0:
        logger.warning("Marker %s not found in %d chars of content", marker, len(text))
        return None

    start = text.find("{", idx + len(marker))
    if start < 0:
        logger.warning("No object follows marker %s", marker)
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]

    logger.warning("Unbalanced object after marker %s", marker)
    return None


def normalize_image_url(src: str) -> str | None:
    """Reduce an image URL to scheme, host[:port] and path.

    Credentials, query and fragment are dropped. None if the URL is not
    absolute or its port is invalid.
    """
    src = src.strip()
    if src.startswith("//"):
        src = "https:" + src

    parsed = urlsplit(src)
    try:
        host, port = parsed.hostname, parsed.port
    except ValueError:
        return None
    if not parsed.scheme or not host:
        return None
    if ":" in host:
        host = f"[{host}]"
    if port is not None:
        host = f"{host}:{port}"
    return f"{parsed.scheme}://{host}{parsed.path}"


def _item_images(item: dict) -> list[str]:
    html = item.get("html")
    if not isinstance(html, str):
        html = DEFAULT_ITEM_HTML
    item_type = item.get("type")
    if not isinstance(item_type, str):
        item_type = DEFAULT_ITEM_TYPE

    attr = GIF_SRC_ATTR if item_type == GIF_TYPE else "src"
    sources = []
    for node in HTMLParser(html).css("img"):
        value = node.attributes.get(attr)
        if value:
            sources.append(value)
    return sources


def parse_sub_page(html: str, marker: str = GALLERY_MARKER) -> list[str]:
    """Extract normalized image URLs from the gallery data embedded in a sub-page."""
    blob = find_balanced_json(html, marker)
    if blob is None:
        raise NoEmbeddedData("No JSON found in Page's content.")

    try:
        data = json.loads(blob)
    except json.JSONDecodeError as e:
        raise MalformedData(f"Invalid gallery JSON: {e}") from e

    items = data.get("items") if isinstance(data, dict) else None
    if items is None:
        raise MalformedData(f"No items found in: {blob[:200]}")
    if not isinstance(items, list):
        raise MalformedData(f"Items is not an array: {blob[:200]}")

    images = []
    for item in items:
        if not isinstance(item, dict):
            continue
        for src in _item_images(item):
            url = normalize_image_url(src)
            if url:
                images.append(url)
    return images
