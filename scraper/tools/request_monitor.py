"""
AJAX monitor: load a URL, capture xhr/fetch traffic for a while, save it.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import dataclass
from pathlib import Path

from playwright.async_api import async_playwright

from scraper.crawl import NAV_TIMEOUT_MS, open_page
from scraper.tools.request_tracker import RequestTracker
from shared.logging import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)

DEFAULT_WAIT_TIME_MS = 10_000


@dataclass
class MonitorResult:
    data: dict
    path: Path


def _percentage(count: int, total: int) -> float:
    return round(count / total * 100, 2) if total else 0.0


def summarize_by_type(data: dict) -> list[tuple[str, int, float]]:
    """(resource type, request count, percentage of all requests)."""
    total = data.get("totalRequests", 0)
    counts = Counter(req.get("resourceType", "") for req in data.get("requests", []))
    return [(rtype, count, _percentage(count, total)) for rtype, count in counts.most_common()]


def summarize_by_status(data: dict) -> list[tuple[int, int, float]]:
    """(status code, response count, percentage of all responses), sorted by status."""
    total = data.get("totalResponses", 0)
    counts = Counter(
        req["response"]["status"] for req in data.get("requests", []) if req.get("response")
    )
    return [(status, count, _percentage(count, total)) for status, count in sorted(counts.items())]


async def monitor_requests(
    url: str,
    *,
    output_dir: str | Path,
    wait_time_ms: int = DEFAULT_WAIT_TIME_MS,
    headless: bool = True,
) -> MonitorResult:
    """Navigate (domcontentloaded), wait wait_time_ms, then save captured traffic."""
    bind_request_context(tool="request_monitor", url=url)
    try:
        logger.info("request_monitor_started", wait_time_ms=wait_time_ms)
        tracker = RequestTracker()
        async with async_playwright() as p:
            async with open_page(p, headless=headless) as (_browser, context, page):
                tracker.attach(context)
                await page.goto(url, wait_until="domcontentloaded", timeout=NAV_TIMEOUT_MS)
                await asyncio.sleep(wait_time_ms / 1000)
                path = tracker.save_to_file(url, output_dir)
                data = tracker.get_all_data()

        logger.info(
            "request_monitor_completed",
            total_requests=data["totalRequests"],
            total_responses=data["totalResponses"],
            path=str(path),
        )
        return MonitorResult(data=data, path=path)
    finally:
        clear_request_context()
