"""
Site runner: one browser per site, one try/except per site, results to disk.

Sites run sequentially inside a single Playwright session. A failing site is
logged and reported as failed; the remaining sites still run.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional, Sequence

from playwright.async_api import Playwright, async_playwright

from scraper.crawl import navigate, open_page
from scraper.results import save_results
from scraper.scrapers import scrape_products
from scraper.sites import SiteConfig, SiteTable, select_sites
from shared.config import AppConfig
from shared.logging import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)

SiteStatus = Literal["ok", "empty", "failed"]


@dataclass
class SiteRunResult:
    """Outcome of scraping one site (records stay in memory until saved)."""

    site: str
    status: SiteStatus
    records: list[dict] = field(default_factory=list)
    error: Optional[str] = None
    error_type: Optional[str] = None


@dataclass
class SiteRunSummary:
    site: str
    status: SiteStatus
    record_count: int
    files: list[Path] = field(default_factory=list)
    error: Optional[str] = None


async def scrape_site(
    playwright: Playwright,
    site_name: str,
    site: SiteConfig,
    *,
    config: AppConfig,
    rng: Optional[random.Random] = None,
) -> SiteRunResult:
    """
    Open a page, navigate and run the site's scraper.

    Any exception is caught here and turned into a failed result.
    """
    bind_request_context(site=site_name, url=site.url)
    logger.info("site_scrape_started", scraper_type=site.type)
    try:
        async with open_page(playwright, headless=config.headless) as (_browser, _context, page):
            await navigate(
                page,
                site.url,
                wait_for_network_idle=site.wait_for_network_idle,
                timeout_ms=config.nav_timeout_ms,
            )
            records = await scrape_products(
                site_name,
                site,
                page,
                selector_timeout_ms=config.wait_selector_timeout_ms,
                rng=rng,
            )
    except Exception as e:
        logger.error(
            "site_scrape_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        return SiteRunResult(
            site=site_name,
            status="failed",
            error=str(e),
            error_type=type(e).__name__,
        )
    finally:
        clear_request_context()

    status: SiteStatus = "ok" if records else "empty"
    logger.info("site_scrape_completed", site=site_name, record_count=len(records), status=status)
    return SiteRunResult(site=site_name, status=status, records=records)


async def run_sites(
    table: SiteTable,
    *,
    config: AppConfig,
    names: Optional[Sequence[str]] = None,
    rng: Optional[random.Random] = None,
) -> list[SiteRunSummary]:
    """
    Scrape the selected sites in configured order and save non-empty results.

    PRODUCT_LIMIT / REINDEX_PRODUCTS from the environment override the site
    table's global settings.
    """
    sites = select_sites(table.sites, names, table.ignore_list)
    product_limit = config.product_limit or table.global_config.product_limit
    reindex = (
        config.reindex_products
        if config.reindex_products is not None
        else table.global_config.reindex_products
    )
    logger.info(
        "scrape_run_started",
        sites=[site.name for site in sites],
        product_limit=product_limit,
        reindex=reindex,
        results_dir=config.results_dir,
    )

    summaries: list[SiteRunSummary] = []
    async with async_playwright() as p:
        for site in sites:
            result = await scrape_site(p, site.name, site, config=config, rng=rng)
            summary = SiteRunSummary(
                site=site.name,
                status=result.status,
                record_count=len(result.records),
                error=result.error,
            )
            if result.records:
                try:
                    summary.files = save_results(
                        site.name,
                        result.records,
                        results_dir=config.results_dir,
                        product_limit=product_limit,
                        reindex=reindex,
                    )
                except OSError as e:
                    logger.error(
                        "results_write_failed",
                        site=site.name,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    summary.status = "failed"
                    summary.error = str(e)
            summaries.append(summary)

    logger.info(
        "scrape_run_completed",
        ok=sum(1 for s in summaries if s.status == "ok"),
        empty=sum(1 for s in summaries if s.status == "empty"),
        failed=sum(1 for s in summaries if s.status == "failed"),
    )
    return summaries
