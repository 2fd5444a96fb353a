"""Tests for listing and gallery parsing."""

import json

import pytest

from gallery_crawler.errors import MalformedData, NoEmbeddedData
from gallery_crawler.parser import (
    find_balanced_json,
    listing_pages,
    normalize_image_url,
    parse_listing_page,
    parse_sub_page,
)

from conftest import gallery_html, listing_html


class TestListingPages:
    def test_first_page_has_no_page_suffix(self):
        """Page 1 is the category root."""
        pages = listing_pages("https://example.com/category/cats", 3)
        assert pages[0] == "https://example.com/category/cats/"

    def test_builds_all_pages_in_order(self):
        """Pages 2..N use the /page/<n>/ form."""
        pages = listing_pages("https://example.com/category/cats/", 3)
        assert pages == [
            "https://example.com/category/cats/",
            "https://example.com/category/cats/page/2/",
            "https://example.com/category/cats/page/3/",
        ]

    def test_zero_pages(self):
        assert listing_pages("https://example.com/c", 0) == []


class TestParseListingPage:
    def test_returns_card_links(self):
        """Three cards yield exactly those three links."""
        links = [
            "https://example.com/gallery-1/",
            "https://example.com/gallery-2/",
            "https://example.com/gallery-3/",
        ]
        result = parse_listing_page(listing_html(links))
        assert set(result) == set(links)
        assert len(result) == 3

    def test_ignores_links_outside_main_column(self):
        """Card-like links outside the content column are skipped."""
        result = parse_listing_page(listing_html(["https://example.com/gallery-1/"]))
        assert "https://example.com/ad/" not in result

    def test_no_matches_returns_empty_list(self):
        """A page without cards is not an error."""
        assert parse_listing_page("<html><body><p>Nothing here</p></body></html>") == []

    def test_skips_cards_without_href(self):
        html = listing_html(["https://example.com/gallery-1/"]).replace(
            'href="https://example.com/gallery-1/"', ""
        )
        assert parse_listing_page(html) == []


class TestFindBalancedJson:
    def test_round_trips_nested_object(self):
        """The extracted substring parses back to the embedded object."""
        data = {"items": [{"a": {"b": {"c": 1}}}, {"d": []}], "meta": {"x": {"y": None}}}
        text = f"var CHIVE_GALLERY_ITEMS = {json.dumps(data)}; var other = {{}};"
        blob = find_balanced_json(text, "CHIVE_GALLERY_ITEMS")
        assert json.loads(blob) == data

    def test_braces_inside_strings(self):
        """Braces in string literals do not affect depth."""
        data = {"html": "<p>}{ not a brace }</p>", "q": "say \"}\""}
        text = "MARKER = " + json.dumps(data) + " trailing }"
        assert json.loads(find_balanced_json(text, "MARKER")) == data

    def test_ignores_braces_before_marker(self):
        text = '{"decoy": 1} MARKER {"real": true}'
        assert find_balanced_json(text, "MARKER") == '{"real": true}'

    def test_missing_marker_returns_none(self):
        assert find_balanced_json('{"items": []}', "MARKER") is None

    def test_missing_object_returns_none(self):
        assert find_balanced_json("MARKER = null;", "MARKER") is None

    def test_unbalanced_returns_none(self):
        assert find_balanced_json('MARKER = {"a": {"b": 1}', "MARKER") is None


class TestNormalizeImageUrl:
    def test_drops_query_and_fragment(self):
        assert normalize_image_url("https://cdn.example.com/a/b.jpg?w=100#top") == "https://cdn.example.com/a/b.jpg"

    def test_protocol_relative(self):
        assert normalize_image_url("//cdn.example.com/b.jpg") == "https://cdn.example.com/b.jpg"

    def test_relative_url_rejected(self):
        assert normalize_image_url("/images/b.jpg") is None

    def test_keeps_port(self):
        assert normalize_image_url("http://localhost:8080/b.png?x=1") == "http://localhost:8080/b.png"

    def test_drops_credentials(self):
        assert normalize_image_url("https://user:pw@cdn.example.com/a.jpg?x=1") == "https://cdn.example.com/a.jpg"

    def test_invalid_port_rejected(self):
        assert normalize_image_url("http://cdn.example.com:abc/a.jpg") is None


class TestParseSubPage:
    def test_gif_uses_alternate_attribute(self):
        """Gif items use data-gifsrc, others use src."""
        items = [
            {
                "type": "gif",
                "html": '<figure><img src="https://cdn.example.com/still.jpg?w=1" '
                        'data-gifsrc="https://cdn.example.com/anim.gif?x=2"></figure>',
            },
            {
                "type": "attachment",
                "html": '<figure><img src="https://cdn.example.com/photo.jpg?quality=80#f"></figure>',
            },
        ]
        html = f"<script>CHIVE_GALLERY_ITEMS = {json.dumps({'items': items})};</script>"
        result = parse_sub_page(html)
        assert sorted(result) == [
            "https://cdn.example.com/anim.gif",
            "https://cdn.example.com/photo.jpg",
        ]

    def test_default_type_and_html(self):
        """Items without html contribute nothing; without type use src."""
        items = [{}, {"html": '<img src="https://cdn.example.com/a.jpg">'}]
        html = f"CHIVE_GALLERY_ITEMS = {json.dumps({'items': items})}"
        assert parse_sub_page(html) == ["https://cdn.example.com/a.jpg"]

    def test_multiple_images_per_item(self):
        images = ["https://cdn.example.com/1.jpg", "https://cdn.example.com/2.jpg"]
        items = [{"html": "".join(f'<img src="{src}">' for src in images)}]
        html = f"CHIVE_GALLERY_ITEMS = {json.dumps({'items': items})}"
        assert parse_sub_page(html) == images

    def test_gallery_fixture(self):
        images = ["https://cdn.example.com/1.jpg", "https://cdn.example.com/2.jpg"]
        assert parse_sub_page(gallery_html(images)) == images

    def test_custom_marker(self):
        html = gallery_html(["https://cdn.example.com/1.jpg"], marker="OTHER_ITEMS")
        assert parse_sub_page(html, marker="OTHER_ITEMS") == ["https://cdn.example.com/1.jpg"]

    def test_missing_blob(self):
        with pytest.raises(NoEmbeddedData):
            parse_sub_page("<html><body>No gallery</body></html>")

    def test_missing_items(self):
        with pytest.raises(MalformedData):
            parse_sub_page('CHIVE_GALLERY_ITEMS = {"entries": []}')

    def test_items_not_array(self):
        with pytest.raises(MalformedData):
            parse_sub_page('CHIVE_GALLERY_ITEMS = {"items": {"html": "<img>"}}')

    def test_invalid_json(self):
        with pytest.raises(MalformedData):
            parse_sub_page("CHIVE_GALLERY_ITEMS = {items: [1, 2]}")
