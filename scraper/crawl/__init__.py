"""
Playwright-based crawling helpers for product scraping.

This package implements the browser driver, page readiness (wait selector,
settle wait, auto-scroll), standard selector extraction and pagination.

Public API: re-exports the symbols used by scrapers, the runner and tests so
that `from scraper.crawl import ...` is the single import point.
"""

from __future__ import annotations

from scraper.crawl.browser import (
    build_context_options,
    create_browser_context,
    device_context_options,
    navigate,
    open_page,
)
from scraper.crawl.constants import (
    ELEMENT_SCREENSHOT_TIMEOUT_MS,
    MAX_SCROLL_STEPS,
    NAV_TIMEOUT_MS,
    SCROLL_DISTANCE_PX,
    SCROLL_INTERVAL_MS,
    WAIT_SELECTOR_TIMEOUT_MS,
)
from scraper.crawl.extraction import (
    build_records,
    extract_products,
    extract_raw_products,
    normalize_url,
    resolve_image_url,
    resolve_link_url,
)
from scraper.crawl.pagination import find_next_control, paginate, resolve_page_cap
from scraper.crawl.readiness import auto_scroll, wait_for_content
from scraper.crawl.text import normalize_whitespace

__all__ = [
    # constants
    "NAV_TIMEOUT_MS",
    "WAIT_SELECTOR_TIMEOUT_MS",
    "ELEMENT_SCREENSHOT_TIMEOUT_MS",
    "SCROLL_DISTANCE_PX",
    "SCROLL_INTERVAL_MS",
    "MAX_SCROLL_STEPS",
    # browser
    "build_context_options",
    "create_browser_context",
    "device_context_options",
    "navigate",
    "open_page",
    # readiness
    "wait_for_content",
    "auto_scroll",
    # extraction
    "build_records",
    "extract_products",
    "extract_raw_products",
    "normalize_url",
    "resolve_image_url",
    "resolve_link_url",
    # pagination
    "find_next_control",
    "paginate",
    "resolve_page_cap",
    # text
    "normalize_whitespace",
]
