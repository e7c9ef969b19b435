"""
Standard scraper: wait, optional auto-scroll, selector extraction, optional pagination.
"""

from __future__ import annotations

import random
from typing import Optional

from playwright.async_api import Page

from scraper.crawl import auto_scroll, extract_products, paginate, wait_for_content
from scraper.crawl.constants import WAIT_SELECTOR_TIMEOUT_MS
from scraper.sites import SiteConfig, SiteConfigError
from shared.logging import get_logger

logger = get_logger(__name__)


async def standard_scraper(
    site_name: str,
    site: SiteConfig,
    page: Page,
    *,
    selector_timeout_ms: int = WAIT_SELECTOR_TIMEOUT_MS,
    rng: Optional[random.Random] = None,
) -> list[dict]:
    """Scrape product records from the current page (and following pages)."""
    if site.selectors is None:
        raise SiteConfigError(f"Site {site_name!r}: standard scraper requires selectors")

    logger.info("standard_scraper_started", site=site_name)
    await wait_for_content(
        page,
        wait_selector=site.wait_selector,
        wait_time_ms=site.wait_time_ms,
        selector_timeout_ms=selector_timeout_ms,
    )
    if site.auto_scroll:
        await auto_scroll(page)

    selectors = site.selectors

    async def extract_page(start_id: int) -> list[dict]:
        return await extract_products(page, selectors, rng=rng, start_id=start_id)

    if site.pagination.enabled:
        return await paginate(
            page,
            site,
            extract_page,
            selector_timeout_ms=selector_timeout_ms,
        )
    return await extract_page(1)
