"""
Performance tool: load a URL several times and collect navigation/paint/resource timings.

Each run uses a fresh browser context. A resource PerformanceObserver is
installed as an init script so it sees every resource of the navigation.
Network throttling is applied through a Chromium CDP session.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from numbers import Number
from pathlib import Path
from typing import Optional

from playwright.async_api import Browser, BrowserContext, Page, async_playwright

from scraper.crawl import NAV_TIMEOUT_MS, build_context_options, create_browser_context
from scraper.storage import build_output_path, write_json
from shared.logging import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)

DEFAULT_RUNS = 3

# Bytes per second / ms latency, as used by Chrome DevTools presets.
THROTTLING_PRESETS: dict[str, dict[str, float]] = {
    "slow3G": {
        "downloadThroughput": 500 * 1024 / 8,
        "uploadThroughput": 500 * 1024 / 8,
        "latency": 400,
    },
    "fast3G": {
        "downloadThroughput": 1.5 * 1024 * 1024 / 8,
        "uploadThroughput": 750 * 1024 / 8,
        "latency": 150,
    },
}

RESOURCE_OBSERVER_JS = """
window.__perfResources = [];
try {
  new PerformanceObserver((list) => {
    list.getEntries().forEach((entry) => {
      if (entry.entryType === 'resource') {
        window.__perfResources.push({
          name: entry.name,
          entryType: entry.entryType,
          startTime: entry.startTime,
          duration: entry.duration,
          transferSize: entry.transferSize,
          decodedBodySize: entry.decodedBodySize,
        });
      }
    });
  }).observe({ type: 'resource', buffered: true });
} catch (e) {}
"""

COLLECT_METRICS_JS = """
() => {
  const timing = performance.timing || {};
  const navigation = performance.getEntriesByType('navigation')[0] || {};
  const paint = performance.getEntriesByType('paint');
  const resources = window.__perfResources || [];
  const since = (end, start) => (timing[end] || 0) - (timing[start] || 0);

  const timings = {
    navigationStart: timing.navigationStart || 0,
    redirectTime: since('redirectEnd', 'redirectStart'),
    dnsTime: since('domainLookupEnd', 'domainLookupStart'),
    connectTime: since('connectEnd', 'connectStart'),
    responseTime: since('responseEnd', 'requestStart'),
    domInteractive: since('domInteractive', 'navigationStart'),
    domContentLoaded: since('domContentLoadedEventEnd', 'navigationStart'),
    domComplete: since('domComplete', 'navigationStart'),
    loadEvent: since('loadEventEnd', 'navigationStart'),
    firstPaint: 0,
    firstContentfulPaint: 0,
    navigationType: navigation.type || '',
    resourceCount: resources.length,
    totalResourceSize: resources.reduce((total, r) => total + (r.transferSize || 0), 0),
    timeToFirstByte: since('responseStart', 'requestStart'),
  };
  paint.forEach((entry) => {
    if (entry.name === 'first-paint') timings.firstPaint = entry.startTime;
    if (entry.name === 'first-contentful-paint') timings.firstContentfulPaint = entry.startTime;
  });
  return { timings, resources, userAgent: navigator.userAgent, url: window.location.href };
}
"""


def resolve_throttling(name: Optional[str]) -> Optional[dict[str, float]]:
    """Preset by name; None for no throttling. Unknown names raise ValueError."""
    if not name:
        return None
    try:
        return dict(THROTTLING_PRESETS[name])
    except KeyError:
        raise ValueError(
            f"Unknown throttling preset {name!r}; expected one of {sorted(THROTTLING_PRESETS)}"
        ) from None


async def apply_throttling(context: BrowserContext, page: Page, conditions: dict[str, float]) -> None:
    cdp = await context.new_cdp_session(page)
    await cdp.send("Network.enable")
    await cdp.send("Network.emulateNetworkConditions", {"offline": False, **conditions})


async def measure_run(
    browser: Browser,
    url: str,
    run_number: int,
    *,
    context_options: Optional[dict] = None,
    throttling: Optional[dict[str, float]] = None,
) -> dict:
    """One measured page load in a fresh context."""
    context = await create_browser_context(browser, options=context_options)
    try:
        page = await context.new_page()
        await page.add_init_script(RESOURCE_OBSERVER_JS)
        if throttling:
            await apply_throttling(context, page, throttling)

        start = time.monotonic()
        response = await page.goto(url, wait_until="load", timeout=NAV_TIMEOUT_MS)
        load_time_ms = (time.monotonic() - start) * 1000
        await page.wait_for_load_state("networkidle")

        metrics = await page.evaluate(COLLECT_METRICS_JS)
        metrics["statusCode"] = response.status if response is not None else None
        metrics["statusText"] = response.status_text if response is not None else None
        metrics["headers"] = response.headers if response is not None else {}
        metrics["loadTime"] = load_time_ms
        metrics["runNumber"] = run_number
        logger.info("performance_run_completed", run_number=run_number, load_time_ms=round(load_time_ms))
        return metrics
    finally:
        await context.close()


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def calculate_averages(runs: list[dict]) -> dict:
    """Average every numeric timing plus load time, resource count and size."""
    if not runs:
        raise ValueError("calculate_averages requires at least one run")

    timing_keys = [
        key
        for key, value in runs[0]["timings"].items()
        if isinstance(value, Number) and not isinstance(value, bool)
    ]
    timings = {key: _mean([run["timings"].get(key, 0) or 0 for run in runs]) for key in timing_keys}
    return {
        "timings": timings,
        "loadTime": _mean([run.get("loadTime", 0) for run in runs]),
        "resourceCount": _mean([run["timings"].get("resourceCount", 0) for run in runs]),
        "resourceSize": _mean([run["timings"].get("totalResourceSize", 0) for run in runs]),
    }


def performance_rating(load_time_ms: float) -> str:
    if load_time_ms < 1000:
        return "excellent (< 1s)"
    if load_time_ms < 2000:
        return "good (< 2s)"
    if load_time_ms < 3000:
        return "average (< 3s)"
    if load_time_ms < 5000:
        return "slow (< 5s)"
    return "very slow (>= 5s)"


def optimization_suggestions(averages: dict) -> list[str]:
    timings = averages.get("timings", {})
    suggestions = []
    if timings.get("timeToFirstByte", 0) > 200:
        suggestions.append("Time to first byte is high; look at server response time")
    if averages.get("resourceCount", 0) > 30:
        suggestions.append("Many resources; consider bundling files or HTTP/2")
    if averages.get("resourceSize", 0) > 1024 * 1024:
        suggestions.append("Resources exceed 1 MB in total; compress or lazy-load them")
    if timings.get("firstContentfulPaint", 0) > 1500:
        suggestions.append("First contentful paint is slow; optimize the critical rendering path")
    return suggestions


async def run_performance_test(
    url: str,
    *,
    output_dir: str | Path,
    runs: int = DEFAULT_RUNS,
    device: Optional[str] = None,
    throttling: Optional[str] = None,
    headless: bool = True,
) -> dict:
    """Measure url `runs` times, write {domain}_{timestamp}.json and return the results."""
    if runs < 1:
        raise ValueError(f"runs must be at least 1, got {runs}")
    conditions = resolve_throttling(throttling)
    bind_request_context(tool="performance", url=url)
    try:
        logger.info("performance_test_started", runs=runs, device=device, throttling=throttling)

        path = build_output_path(output_dir, url, ext="json")
        all_runs: list[dict] = []
        async with async_playwright() as p:
            context_options = build_context_options(p, device=device)
            browser = await p.chromium.launch(headless=headless)
            try:
                for run_number in range(1, runs + 1):
                    all_runs.append(
                        await measure_run(
                            browser,
                            url,
                            run_number,
                            context_options=context_options,
                            throttling=conditions,
                        )
                    )
            finally:
                await browser.close()

        averages = calculate_averages(all_runs)
        results = {
            "url": url,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "device": device,
            "throttling": throttling,
            "throttlingConditions": conditions,
            "runs": all_runs,
            "averages": averages,
            "rating": performance_rating(averages["loadTime"]),
            "suggestions": optimization_suggestions(averages),
            "file": str(path),
        }
        write_json(path, results)
        logger.info("performance_results_saved", path=str(path), avg_load_time_ms=round(averages["loadTime"]))
        return results
    finally:
        clear_request_context()
