"""
Pagination loop: click "next", wait, re-extract, concatenate.

Stops when there is no usable next control (missing, hidden, disabled),
when the page cap is reached, when a page yields no records, or when a
click did not advance (same first record as the previous page).
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from playwright.async_api import Locator, Page

from scraper.crawl.constants import (
    NEXT_CONTROL_VISIBILITY_TIMEOUT_MS,
    PAGINATION_LOAD_TIMEOUT_MS,
    PAGINATION_SETTLE_MS,
    WAIT_SELECTOR_TIMEOUT_MS,
)
from scraper.crawl.readiness import auto_scroll, wait_for_content
from scraper.crawl.text import normalize_whitespace
from scraper.sites import PaginationConfig, SiteConfig
from shared.logging import get_logger

logger = get_logger(__name__)

ExtractPage = Callable[[int], Awaitable[list[dict]]]

IS_DISABLED_JS = """
(el) => el.disabled === true
  || el.getAttribute('aria-disabled') === 'true'
  || String(el.className || '').toLowerCase().includes('disabled')
"""


async def resolve_page_cap(page: Page, pagination: PaginationConfig) -> int:
    """
    max_pages, lowered to the highest page number shown by page_selector links.

    Non-numeric page links (ellipsis, arrows) are ignored.
    """
    cap = pagination.max_pages
    if not pagination.page_selector:
        return cap
    try:
        texts = await page.locator(pagination.page_selector).all_inner_texts()
    except Exception as e:
        logger.warning("page_links_unreadable", error=str(e), error_type=type(e).__name__)
        return cap
    numbers = [int(t) for t in (normalize_whitespace(text) for text in texts) if t.isdigit()]
    if numbers:
        cap = min(cap, max(max(numbers), 1))
    return cap


async def find_next_control(page: Page, next_selector: str) -> Optional[Locator]:
    """First next_selector match if it exists, is visible and is not disabled."""
    matches = page.locator(next_selector)
    if await matches.count() == 0:
        return None
    control = matches.first
    if not await control.is_visible(timeout=NEXT_CONTROL_VISIBILITY_TIMEOUT_MS):
        return None
    if await control.evaluate(IS_DISABLED_JS):
        return None
    return control


def _page_key(records: list[dict]) -> Optional[tuple]:
    if not records:
        return None
    first = records[0]
    return (first.get("url"), first.get("image"))


async def paginate(
    page: Page,
    site: SiteConfig,
    extract_page: ExtractPage,
    *,
    selector_timeout_ms: int = WAIT_SELECTOR_TIMEOUT_MS,
    on_page: Optional[Callable[[int, list[dict]], None]] = None,
) -> list[dict]:
    """
    Extract page 1, then follow the next control until a stop condition.

    extract_page receives the id to start numbering from, so ids continue
    across pages. Returns records in page order.
    """
    pagination = site.pagination
    max_pages = await resolve_page_cap(page, pagination)

    records = await extract_page(1)
    all_records = list(records)
    if on_page:
        on_page(1, records)
    previous_key = _page_key(records)
    page_number = 1
    stop_reason = "max_pages"

    while page_number < max_pages:
        if not records:
            stop_reason = "empty_page"
            break
        control = await find_next_control(page, pagination.next_selector or "")
        if control is None:
            stop_reason = "no_next_control"
            break

        await control.click()
        await page.wait_for_load_state("load", timeout=PAGINATION_LOAD_TIMEOUT_MS)
        await asyncio.sleep(PAGINATION_SETTLE_MS / 1000)
        await wait_for_content(
            page,
            wait_selector=site.wait_selector,
            wait_time_ms=site.wait_time_ms,
            selector_timeout_ms=selector_timeout_ms,
        )
        if site.auto_scroll:
            await auto_scroll(page)
        page_number += 1

        records = await extract_page(len(all_records) + 1)
        if not records:
            stop_reason = "empty_page"
            break
        key = _page_key(records)
        if key == previous_key:
            stop_reason = "page_not_advanced"
            break
        previous_key = key
        all_records.extend(records)
        logger.info("pagination_page_extracted", page_number=page_number, records=len(records))
        if on_page:
            on_page(page_number, records)

    logger.info(
        "pagination_completed",
        pages=page_number,
        max_pages=max_pages,
        total_records=len(all_records),
        stop_reason=stop_reason,
    )
    return all_records
