"""
Scraper dispatch: pick the scraping strategy from the site's type.
"""

from __future__ import annotations

import random
from typing import Optional

from playwright.async_api import Page

from scraper.crawl.constants import WAIT_SELECTOR_TIMEOUT_MS
from scraper.scrapers.image import build_image_records, image_scraper
from scraper.scrapers.standard import standard_scraper
from scraper.sites import SiteConfig
from shared.logging import get_logger

logger = get_logger(__name__)

SCRAPER_TYPES = ("standard", "image")


async def scrape_products(
    site_name: str,
    site: SiteConfig,
    page: Page,
    *,
    selector_timeout_ms: int = WAIT_SELECTOR_TIMEOUT_MS,
    rng: Optional[random.Random] = None,
) -> list[dict]:
    """Run the scraper for site.type; unknown types fall back to the standard scraper."""
    if site.type == "image":
        return await image_scraper(page, rng=rng)
    if site.type not in SCRAPER_TYPES:
        logger.warning("unknown_scraper_type", site=site_name, scraper_type=site.type)
    return await standard_scraper(
        site_name,
        site,
        page,
        selector_timeout_ms=selector_timeout_ms,
        rng=rng,
    )


__all__ = [
    "SCRAPER_TYPES",
    "build_image_records",
    "image_scraper",
    "scrape_products",
    "standard_scraper",
]
