"""
Screenshot tool: full-page, viewport or single-element PNG of a URL.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Optional

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from scraper.crawl import ELEMENT_SCREENSHOT_TIMEOUT_MS, NAV_TIMEOUT_MS, open_page
from scraper.crawl.browser import Viewport
from scraper.storage import build_output_path, ensure_parent_dir
from shared.logging import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)

DEFAULT_WAIT_TIME_MS = 2000


class ElementNotFoundError(LookupError):
    """The selector matched no element to screenshot."""


def selector_slug(selector: str) -> str:
    """File-name suffix for a selector: every non-word character becomes '-'."""
    return re.sub(r"[^\w]", "-", selector)


async def take_screenshot(
    page: Page,
    path: Path,
    *,
    selector: Optional[str] = None,
    full_page: bool = True,
) -> Path:
    """
    Screenshot the page (or the first element matching selector) to path.

    Raises ElementNotFoundError when the selector matches nothing within
    ELEMENT_SCREENSHOT_TIMEOUT_MS.
    """
    ensure_parent_dir(path)
    if selector:
        try:
            await page.wait_for_selector(selector, timeout=ELEMENT_SCREENSHOT_TIMEOUT_MS)
        except PlaywrightTimeoutError as e:
            raise ElementNotFoundError(f"Element not found: {selector}") from e
        element = await page.query_selector(selector)
        if element is None:
            raise ElementNotFoundError(f"Element not found: {selector}")
        await element.screenshot(path=str(path))
    else:
        await page.screenshot(path=str(path), full_page=full_page)
    return path


async def load_for_capture(page: Page, url: str, wait_time_ms: int) -> None:
    await page.goto(url, wait_until="domcontentloaded", timeout=NAV_TIMEOUT_MS)
    if wait_time_ms > 0:
        await asyncio.sleep(wait_time_ms / 1000)


async def capture_screenshot(
    url: str,
    *,
    output_dir: str | Path,
    full_page: bool = True,
    selector: Optional[str] = None,
    wait_time_ms: int = DEFAULT_WAIT_TIME_MS,
    device: Optional[str] = None,
    viewport: Optional[Viewport] = None,
    headless: bool = True,
) -> Path:
    """Load url, wait, capture; returns the PNG path."""
    bind_request_context(tool="screenshot", url=url)
    suffix = f"_{selector_slug(selector)}" if selector else ""
    path = build_output_path(output_dir, url, ext="png", suffix=suffix)

    try:
        async with async_playwright() as p:
            async with open_page(p, headless=headless, device=device, viewport=viewport) as (
                _browser,
                _context,
                page,
            ):
                await load_for_capture(page, url, wait_time_ms)
                await take_screenshot(page, path, selector=selector, full_page=full_page)

        logger.info(
            "screenshot_saved",
            path=str(path),
            selector=selector,
            full_page=full_page if not selector else None,
            device=device,
        )
        return path
    finally:
        clear_request_context()
