"""
Standard product extraction: selector chains in the page, URL normalization in Python.

One page.evaluate collects raw fields for every product element (first
matching selector of each chain wins). Python then resolves image and link
URLs against the page URL, drops products without an image, assigns ids and
backfills placeholder names and prices.
"""

from __future__ import annotations

import random
import re
from typing import Any, Mapping, Optional
from urllib.parse import urldefrag, urljoin

from playwright.async_api import Page

from scraper.crawl.text import normalize_whitespace
from scraper.mock_data import fill_placeholders
from scraper.sites import SelectorSet
from shared.logging import get_logger

logger = get_logger(__name__)

EXTRACT_PRODUCTS_JS = """
(selectors) => {
  const first = (root, chain) => {
    for (const sel of chain || []) {
      try {
        const el = root.querySelector(sel);
        if (el) return el;
      } catch (e) {}
    }
    return null;
  };
  const all = (chain) => {
    for (const sel of chain || []) {
      try {
        const els = document.querySelectorAll(sel);
        if (els.length) return Array.from(els);
      } catch (e) {}
    }
    return [];
  };
  const text = (el) => (el ? (el.textContent || '').trim() : '');

  return all(selectors.product).map((el) => {
    const nameEl = first(el, selectors.name);
    const priceEl = first(el, selectors.price);
    const imageEl = first(el, selectors.image);
    const linkEl = first(el, selectors.link) || (imageEl ? imageEl.closest('a') : null);
    const attr = (name) => (imageEl ? imageEl.getAttribute(name) : null);
    return {
      name: text(nameEl),
      price: text(priceEl),
      image: imageEl ? {
        src: typeof imageEl.src === 'string' ? imageEl.src : null,
        src_attr: attr('src'),
        style: attr('style'),
        data_bgset: attr('data-bgset'),
        data_src: attr('data-src'),
        data_srcset: attr('data-srcset'),
        srcset: attr('srcset'),
      } : null,
      link: linkEl ? (linkEl.getAttribute('href') || linkEl.href || null) : null,
    };
  });
}
"""

BACKGROUND_IMAGE_PATTERN = re.compile(r"""url\(\s*["']?([^"')]+)["']?\s*\)""", re.IGNORECASE)

# (candidate key, kind) in priority order
_IMAGE_CANDIDATE_ORDER = (
    ("src", "url"),
    ("src_attr", "url"),
    ("style", "style"),
    ("data_bgset", "srcset"),
    ("data_src", "url"),
    ("data_srcset", "srcset"),
    ("srcset", "srcset"),
)


def first_srcset_url(value: str) -> Optional[str]:
    """First URL of a srcset/bgset value, without width or density descriptors."""
    first_entry = value.split(",")[0].strip()
    if not first_entry:
        return None
    return first_entry.split()[0]


def background_image_url(style: str) -> Optional[str]:
    """URL from an inline `background-image: url(...)` declaration."""
    if "background" not in style.lower():
        return None
    match = BACKGROUND_IMAGE_PATTERN.search(style)
    return match.group(1).strip() if match else None


def normalize_url(value: Optional[str], base_url: str) -> Optional[str]:
    """
    Absolute http(s) URL or None.

    Protocol-relative URLs get https; relative URLs are joined to base_url;
    data: URIs (lazy-load placeholders) count as missing.
    """
    if not value:
        return None
    value = value.strip()
    if not value or value.lower().startswith(("data:", "javascript:", "about:")):
        return None
    if value.startswith("//"):
        return f"https:{value}"
    return urljoin(base_url, value)


def resolve_image_url(candidates: Optional[Mapping[str, Any]], base_url: str) -> Optional[str]:
    """Pick the first usable image URL from raw image candidates."""
    if not candidates:
        return None
    for key, kind in _IMAGE_CANDIDATE_ORDER:
        raw = candidates.get(key)
        if not isinstance(raw, str) or not raw.strip():
            continue
        if kind == "style":
            raw = background_image_url(raw)
        elif kind == "srcset":
            raw = first_srcset_url(raw)
        url = normalize_url(raw, base_url)
        if url:
            return url
    return None


def resolve_link_url(href: Optional[str], base_url: str) -> Optional[str]:
    """
    Absolute product link, or None for javascript: links and same-page anchors.

    Anchors arrive either raw ("#", "#top") or browser-resolved
    ("https://host/path#"); both point back at the listing page.
    """
    if not href or not href.strip():
        return None
    href = href.strip()
    if href.startswith("#"):
        return None
    url = normalize_url(href, base_url)
    if url is None:
        return None
    target, fragment = urldefrag(url)
    if (fragment or url.endswith("#")) and target == urldefrag(base_url).url:
        return None
    return url


def build_records(
    raw_items: list[Mapping[str, Any]],
    base_url: str,
    *,
    rng: Optional[random.Random] = None,
    start_id: int = 1,
) -> list[dict]:
    """
    Turn raw page items into product records.

    Items without a resolvable image are dropped; ids are sequential from
    start_id over the kept items.
    """
    records: list[dict] = []
    next_id = start_id
    for item in raw_items:
        image = resolve_image_url(item.get("image"), base_url)
        if not image:
            continue
        record = {
            "id": next_id,
            "name": normalize_whitespace(item.get("name")),
            "price": normalize_whitespace(item.get("price")),
            "image": image,
            "url": resolve_link_url(item.get("link"), base_url),
        }
        records.append(fill_placeholders(record, rng))
        next_id += 1
    return records


async def extract_raw_products(page: Page, selectors: SelectorSet) -> list[dict]:
    raw = await page.evaluate(EXTRACT_PRODUCTS_JS, selectors.as_payload())
    return raw if isinstance(raw, list) else []


async def extract_products(
    page: Page,
    selectors: SelectorSet,
    *,
    rng: Optional[random.Random] = None,
    start_id: int = 1,
) -> list[dict]:
    """Extract and build records for the products currently in the DOM."""
    raw_items = await extract_raw_products(page, selectors)
    records = build_records(raw_items, page.url, rng=rng, start_id=start_id)
    logger.info(
        "products_extracted",
        elements_found=len(raw_items),
        records_kept=len(records),
        dropped_without_image=len(raw_items) - len(records),
    )
    return records
