"""
Unit tests for standard extraction: image/link URL resolution, record building, page evaluate.

No Playwright/network required; the page is a mock.
"""

from __future__ import annotations

import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from scraper.crawl.extraction import (
    EXTRACT_PRODUCTS_JS,
    background_image_url,
    build_records,
    extract_products,
    first_srcset_url,
    normalize_url,
    resolve_image_url,
    resolve_link_url,
)
from scraper.sites import SelectorSet

BASE = "https://shop.example.com/collections/all?page=2"


def test_first_srcset_url_drops_descriptors():
    assert first_srcset_url("//cdn.x/a_300.jpg 300w, //cdn.x/a_600.jpg 600w") == "//cdn.x/a_300.jpg"
    assert first_srcset_url("/img/a.png 2x") == "/img/a.png"
    assert first_srcset_url("  , /b.png") is None


def test_background_image_url_variants():
    assert background_image_url("background-image: url('/a.jpg')") == "/a.jpg"
    assert background_image_url('background: #fff url("https://x/b.png") no-repeat') == "https://x/b.png"
    assert background_image_url("color: red") is None
    assert background_image_url("background-color: red") is None


@pytest.mark.parametrize(
    "value,expected",
    [
        ("//cdn.example.com/a.jpg", "https://cdn.example.com/a.jpg"),
        ("/files/a.jpg", "https://shop.example.com/files/a.jpg"),
        ("a.jpg", "https://shop.example.com/collections/a.jpg"),
        ("https://other.example.com/a.jpg", "https://other.example.com/a.jpg"),
        ("data:image/gif;base64,R0lGOD", None),
        ("javascript:void(0)", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_url(value, expected):
    assert normalize_url(value, BASE) == expected


def test_resolve_image_url_prefers_src():
    candidates = {"src": "https://cdn.x/src.jpg", "data_src": "//cdn.x/lazy.jpg"}
    assert resolve_image_url(candidates, BASE) == "https://cdn.x/src.jpg"


def test_resolve_image_url_skips_data_uri_placeholder():
    candidates = {
        "src": "data:image/gif;base64,R0lGOD",
        "src_attr": "data:image/gif;base64,R0lGOD",
        "data_src": "//cdn.x/lazy.jpg",
    }
    assert resolve_image_url(candidates, BASE) == "https://cdn.x/lazy.jpg"


def test_resolve_image_url_background_before_bgset():
    candidates = {
        "src": None,
        "style": "background-image: url(//cdn.x/bg.jpg)",
        "data_bgset": "//cdn.x/bgset_180.jpg 180w",
    }
    assert resolve_image_url(candidates, BASE) == "https://cdn.x/bg.jpg"


def test_resolve_image_url_bgset_then_srcset_family():
    assert (
        resolve_image_url({"data_bgset": "//cdn.x/a_180.jpg 180w, //cdn.x/a_360.jpg 360w"}, BASE)
        == "https://cdn.x/a_180.jpg"
    )
    assert resolve_image_url({"srcset": "/img/a.jpg 1x, /img/a@2x.jpg 2x"}, BASE) == (
        "https://shop.example.com/img/a.jpg"
    )


def test_resolve_image_url_none_when_no_candidates():
    assert resolve_image_url(None, BASE) is None
    assert resolve_image_url({"src": "", "style": "color: red"}, BASE) is None


def test_resolve_link_url():
    assert resolve_link_url("/products/takis", BASE) == "https://shop.example.com/products/takis"
    assert resolve_link_url("#", BASE) is None
    assert resolve_link_url("   ", BASE) is None
    assert resolve_link_url(None, BASE) is None


def test_resolve_link_url_drops_browser_resolved_same_page_anchors():
    """HTMLAnchorElement.href turns href="#" into the page URL plus "#"."""
    page_url = "https://shop.test/collections/all"
    assert resolve_link_url("https://shop.test/collections/all#", page_url) is None
    assert resolve_link_url("https://shop.test/collections/all#reviews", page_url) is None
    assert resolve_link_url("javascript:void(0)", page_url) is None
    assert resolve_link_url("https://shop.test/products/a#reviews", page_url) == (
        "https://shop.test/products/a#reviews"
    )


def test_build_records_browser_shaped_anchor_link_is_none():
    raw_items = [
        {
            "name": "A",
            "price": "$1",
            "image": {"src": "https://shop.test/a.png"},
            "link": "https://shop.test/collections/all#",
        }
    ]
    record = build_records(raw_items, "https://shop.test/collections/all", rng=random.Random(0))[0]
    assert record["url"] is None


def _raw(name="Takis", price="$4.99", image="//cdn.x/t.jpg", link="/products/t"):
    return {
        "name": name,
        "price": price,
        "image": {"src": image} if image is not None else None,
        "link": link,
    }


def test_build_records_drops_items_without_image_and_numbers_sequentially():
    raw_items = [_raw(name="A"), _raw(name="B", image=None), _raw(name="C", image="")]
    raw_items.append(_raw(name="D"))
    records = build_records(raw_items, BASE, rng=random.Random(0), start_id=5)
    assert [r["name"] for r in records] == ["A", "D"]
    assert [r["id"] for r in records] == [5, 6]
    assert records[0] == {
        "id": 5,
        "name": "A",
        "price": "$4.99",
        "image": "https://cdn.x/t.jpg",
        "url": "https://shop.example.com/products/t",
    }


def test_build_records_normalizes_whitespace_and_fills_placeholders():
    raw_items = [_raw(name="  Hot \n  Chips  ", price="", link=None)]
    record = build_records(raw_items, BASE, rng=random.Random(0))[0]
    assert record["name"] == "Hot Chips"
    assert record["price"].startswith("Rs. ")
    assert record["url"] is None


@pytest.mark.asyncio
async def test_extract_products_passes_selector_payload_and_uses_page_url():
    page = MagicMock()
    page.url = BASE
    page.evaluate = AsyncMock(return_value=[_raw(name="A"), _raw(name="B")])
    selectors = SelectorSet(
        product=(".card",), name=(".title", "h3"), price=(".price",), image=("img",)
    )

    records = await extract_products(page, selectors, rng=random.Random(0), start_id=11)

    page.evaluate.assert_awaited_once()
    script, payload = page.evaluate.await_args.args
    assert script == EXTRACT_PRODUCTS_JS
    assert payload["name"] == [".title", "h3"]
    assert payload["link"] == []
    assert [r["id"] for r in records] == [11, 12]


@pytest.mark.asyncio
async def test_extract_products_non_list_result_is_empty():
    page = MagicMock()
    page.url = BASE
    page.evaluate = AsyncMock(return_value=None)
    selectors = SelectorSet(product=("a",), name=("b",), price=("c",), image=("d",))
    assert await extract_products(page, selectors) == []
