"""
Browser driver: launch Chromium, create a context (device or viewport), open a page.

Every site scrape and every tool goes through `open_page` so the browser is
always closed, including when extraction raises.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright

from scraper.crawl.constants import DEFAULT_VIEWPORT, NAV_TIMEOUT_MS
from shared.logging import get_logger

logger = get_logger(__name__)

Viewport = dict[str, int]


def device_context_options(playwright: Playwright, device: str) -> dict:
    """
    Context options for a named Playwright device descriptor (e.g. "iPhone 12").

    Raises ValueError for unknown device names.
    """
    try:
        descriptor = dict(playwright.devices[device])
    except KeyError:
        raise ValueError(f"Unknown device: {device!r}") from None
    # Browser choice is ours (always Chromium); not a context option.
    descriptor.pop("default_browser_type", None)
    return descriptor


def build_context_options(
    playwright: Playwright,
    *,
    device: Optional[str] = None,
    viewport: Optional[Viewport] = None,
) -> dict:
    """Device descriptor wins over an explicit viewport; neither means DEFAULT_VIEWPORT."""
    if device:
        return device_context_options(playwright, device)
    if viewport:
        return {"viewport": {"width": int(viewport["width"]), "height": int(viewport["height"])}}
    return {"viewport": dict(DEFAULT_VIEWPORT)}


async def create_browser_context(
    browser: Browser,
    *,
    options: Optional[dict] = None,
) -> BrowserContext:
    """Create a browser context with the given options (see build_context_options)."""
    return await browser.new_context(**(options or {}))


@asynccontextmanager
async def open_page(
    playwright: Playwright,
    *,
    headless: bool = True,
    device: Optional[str] = None,
    viewport: Optional[Viewport] = None,
) -> AsyncIterator[tuple[Browser, BrowserContext, Page]]:
    """
    Launch Chromium and yield (browser, context, page); the browser is closed on exit.
    """
    options = build_context_options(playwright, device=device, viewport=viewport)
    browser = await playwright.chromium.launch(headless=headless)
    logger.debug("browser_launched", headless=headless, device=device)
    try:
        context = await create_browser_context(browser, options=options)
        page = await context.new_page()
        yield browser, context, page
    finally:
        await browser.close()
        logger.debug("browser_closed")


async def navigate(
    page: Page,
    url: str,
    *,
    wait_for_network_idle: bool = False,
    timeout_ms: int = NAV_TIMEOUT_MS,
):
    """page.goto with networkidle or load; returns the Playwright Response (may be None)."""
    wait_until = "networkidle" if wait_for_network_idle else "load"
    logger.info("navigation_started", url=url, wait_until=wait_until)
    response = await page.goto(url, wait_until=wait_until, timeout=timeout_ms)
    logger.info(
        "navigation_completed",
        url=url,
        status=response.status if response is not None else None,
    )
    return response
