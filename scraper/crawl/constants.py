"""
Crawl constants: timeouts, scroll cadence, pagination settle times.
"""

from __future__ import annotations

# Timeout constants (in milliseconds)
NAV_TIMEOUT_MS = 60_000  # page.goto for site scrapes and tools
WAIT_SELECTOR_TIMEOUT_MS = 60_000  # waitSelector before extraction
ELEMENT_SCREENSHOT_TIMEOUT_MS = 5_000  # selector wait for element screenshots

# Auto-scroll: fixed step every interval until the page bottom is reached
SCROLL_DISTANCE_PX = 100
SCROLL_INTERVAL_MS = 200
MAX_SCROLL_STEPS = 2_000  # 200 000 px; bounds infinite-feed pages

# Pagination
PAGINATION_LOAD_TIMEOUT_MS = 30_000  # load state after clicking "next"
PAGINATION_SETTLE_MS = 1_000  # after load, before re-extraction
NEXT_CONTROL_VISIBILITY_TIMEOUT_MS = 2_000

# Desktop default when neither a device nor a viewport is given
DEFAULT_VIEWPORT = {"width": 1280, "height": 720}
