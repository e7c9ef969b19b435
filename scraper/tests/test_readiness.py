"""
Unit tests for page readiness: wait selector, settle wait and auto-scroll.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from scraper.crawl.constants import MAX_SCROLL_STEPS, SCROLL_DISTANCE_PX
from scraper.crawl.readiness import auto_scroll, wait_for_content


@pytest.mark.asyncio
async def test_wait_for_content_selector_then_sleep():
    page = MagicMock()
    page.wait_for_selector = AsyncMock()
    with patch("scraper.crawl.readiness.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        await wait_for_content(page, wait_selector="#grid", wait_time_ms=8000, selector_timeout_ms=1234)
    page.wait_for_selector.assert_awaited_once_with("#grid", timeout=1234)
    mock_sleep.assert_awaited_once_with(8.0)


@pytest.mark.asyncio
async def test_wait_for_content_nothing_configured_does_nothing():
    page = MagicMock()
    page.wait_for_selector = AsyncMock()
    with patch("scraper.crawl.readiness.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        await wait_for_content(page)
    page.wait_for_selector.assert_not_awaited()
    mock_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_wait_for_content_selector_timeout_propagates():
    page = MagicMock()
    page.wait_for_selector = AsyncMock(side_effect=PlaywrightTimeoutError("Timeout 60000ms exceeded"))
    with patch("scraper.crawl.readiness.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        with pytest.raises(PlaywrightTimeoutError):
            await wait_for_content(page, wait_selector="#grid", wait_time_ms=1000)
    mock_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_auto_scroll_stops_when_distance_reaches_height():
    """Height 250: steps at 100, 200, 300 -> stops after the third."""
    page = MagicMock()
    calls = []

    async def evaluate(script):
        calls.append(script)
        if script.startswith("window.scrollBy"):
            return None
        return 250

    page.evaluate = AsyncMock(side_effect=evaluate)
    with patch("scraper.crawl.readiness.asyncio.sleep", new_callable=AsyncMock):
        steps = await auto_scroll(page)

    assert steps == 3
    assert calls.count(f"window.scrollBy(0, {SCROLL_DISTANCE_PX})") == 3


@pytest.mark.asyncio
async def test_auto_scroll_follows_growing_page():
    """Lazy loading grows the page; scrolling continues until the new bottom."""
    page = MagicMock()
    heights = iter([150, 400, 400, 400, 400])

    async def evaluate(script):
        if script.startswith("window.scrollBy"):
            return None
        return next(heights)

    page.evaluate = AsyncMock(side_effect=evaluate)
    with patch("scraper.crawl.readiness.asyncio.sleep", new_callable=AsyncMock):
        steps = await auto_scroll(page)

    assert steps == 4


@pytest.mark.asyncio
async def test_auto_scroll_bounded_by_step_cap():
    page = MagicMock()

    async def evaluate(script):
        return None if script.startswith("window.scrollBy") else 10**9

    page.evaluate = AsyncMock(side_effect=evaluate)
    with patch("scraper.crawl.readiness.asyncio.sleep", new_callable=AsyncMock):
        steps = await auto_scroll(page)

    assert steps == MAX_SCROLL_STEPS
