"""
Page readiness: wait for the content selector, fixed settle wait, auto-scroll.

Auto-scroll advances a fixed distance per tick and re-reads the document
height each tick, so lazily appended products extend the scroll.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from playwright.async_api import Page

from scraper.crawl.constants import (
    MAX_SCROLL_STEPS,
    SCROLL_DISTANCE_PX,
    SCROLL_INTERVAL_MS,
    WAIT_SELECTOR_TIMEOUT_MS,
)
from shared.logging import get_logger

logger = get_logger(__name__)


async def wait_for_content(
    page: Page,
    *,
    wait_selector: Optional[str] = None,
    wait_time_ms: int = 0,
    selector_timeout_ms: int = WAIT_SELECTOR_TIMEOUT_MS,
) -> None:
    """
    Wait for wait_selector (if set), then sleep wait_time_ms (if positive).

    A selector timeout propagates (PlaywrightTimeoutError); the caller's
    per-site handler records the failure.
    """
    if wait_selector:
        await page.wait_for_selector(wait_selector, timeout=selector_timeout_ms)
        logger.debug("wait_selector_found", selector=wait_selector)
    if wait_time_ms and wait_time_ms > 0:
        await asyncio.sleep(wait_time_ms / 1000)


async def auto_scroll(page: Page) -> int:
    """
    Scroll down SCROLL_DISTANCE_PX every SCROLL_INTERVAL_MS until the
    accumulated distance reaches scrollHeight - innerHeight.

    Returns the number of scroll steps taken.
    """
    logger.info("auto_scroll_started")
    total_height = 0
    steps = 0
    while steps < MAX_SCROLL_STEPS:
        await page.evaluate(f"window.scrollBy(0, {SCROLL_DISTANCE_PX})")
        total_height += SCROLL_DISTANCE_PX
        steps += 1
        await asyncio.sleep(SCROLL_INTERVAL_MS / 1000)
        remaining = await page.evaluate("document.body.scrollHeight - window.innerHeight")
        if total_height >= (remaining or 0):
            break
    else:
        logger.warning("auto_scroll_step_cap_reached", steps=steps)

    logger.info("auto_scroll_completed", steps=steps, scrolled_px=total_height)
    return steps
