"""
Visual regression: screenshot two URLs and diff them pixel by pixel with Pillow.

A pixel differs when its largest per-channel difference exceeds
threshold * 255. The diff image is a faded grayscale copy of the baseline
with differing pixels painted red.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from PIL import Image, ImageChops
from playwright.async_api import Browser, async_playwright

from scraper.crawl import build_context_options, create_browser_context
from scraper.crawl.browser import Viewport
from scraper.storage import ensure_parent_dir, timestamp_slug, write_json
from scraper.tools.screenshot import DEFAULT_WAIT_TIME_MS, load_for_capture, take_screenshot
from shared.logging import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)

DEFAULT_THRESHOLD = 0.1
DIFF_COLOR = (255, 0, 0)
# Blend factor of the baseline in the diff image (0 = white, 1 = full gray)
BASELINE_ALPHA = 0.1


class ImageSizeMismatchError(ValueError):
    """Baseline and comparison images have different dimensions."""


@dataclass
class DiffResult:
    identical: bool
    diff_pixels: int
    diff_percentage: float
    total_pixels: int


def _max_channel_difference(a: Image.Image, b: Image.Image) -> Image.Image:
    channels = ImageChops.difference(a, b).split()
    combined = channels[0]
    for channel in channels[1:]:
        combined = ImageChops.lighter(combined, channel)
    return combined


def _faded_baseline(image: Image.Image) -> Image.Image:
    gray = image.convert("L").point(lambda v: int(255 + (v - 255) * BASELINE_ALPHA))
    return Image.merge("RGB", (gray, gray, gray))


def compare_images(
    baseline_path: str | Path,
    compare_path: str | Path,
    diff_path: str | Path,
    threshold: float = DEFAULT_THRESHOLD,
) -> DiffResult:
    """Compare two PNGs of equal size; writes the diff PNG to diff_path."""
    if not 0 <= threshold <= 1:
        raise ValueError(f"threshold must be between 0 and 1, got {threshold}")

    with Image.open(baseline_path) as baseline_file, Image.open(compare_path) as compare_file:
        baseline = baseline_file.convert("RGBA")
        compare = compare_file.convert("RGBA")

    if baseline.size != compare.size:
        raise ImageSizeMismatchError(
            f"Image sizes differ: {baseline.size[0]}x{baseline.size[1]} "
            f"vs {compare.size[0]}x{compare.size[1]}"
        )

    cutoff = int(threshold * 255)
    mask = _max_channel_difference(baseline, compare).point(lambda v: 255 if v > cutoff else 0)
    diff_pixels = mask.histogram()[255]

    red = Image.new("RGB", baseline.size, DIFF_COLOR)
    diff_image = Image.composite(red, _faded_baseline(baseline), mask)
    diff_path = Path(diff_path)
    ensure_parent_dir(diff_path)
    diff_image.save(diff_path, format="PNG")

    width, height = baseline.size
    total_pixels = width * height
    return DiffResult(
        identical=diff_pixels == 0,
        diff_pixels=diff_pixels,
        diff_percentage=(diff_pixels / total_pixels * 100) if total_pixels else 0.0,
        total_pixels=total_pixels,
    )


async def capture_page(
    browser: Browser,
    url: str,
    path: Path,
    *,
    context_options: Optional[dict] = None,
    selector: Optional[str] = None,
    wait_time_ms: int = DEFAULT_WAIT_TIME_MS,
) -> Path:
    """Full-page (or element) screenshot of url in a fresh context."""
    context = await create_browser_context(browser, options=context_options)
    try:
        page = await context.new_page()
        await load_for_capture(page, url, wait_time_ms)
        return await take_screenshot(page, path, selector=selector, full_page=True)
    finally:
        await context.close()


async def visual_regression_test(
    baseline_url: str,
    compare_url: str,
    *,
    output_dir: str | Path,
    threshold: float = DEFAULT_THRESHOLD,
    selector: Optional[str] = None,
    wait_time_ms: int = DEFAULT_WAIT_TIME_MS,
    device: Optional[str] = None,
    viewport: Optional[Viewport] = None,
    headless: bool = True,
) -> dict:
    """Capture both URLs, diff them and write a JSON report; returns the report."""
    bind_request_context(tool="visual_diff", url=baseline_url, compare_url=compare_url)
    try:
        output_dir = Path(output_dir)
        prefix = f"visual_regression_{timestamp_slug()}"
        baseline_path = output_dir / f"{prefix}_baseline.png"
        compare_path = output_dir / f"{prefix}_compare.png"
        diff_path = output_dir / f"{prefix}_diff.png"
        report_path = output_dir / f"{prefix}_report.json"

        async with async_playwright() as p:
            context_options = build_context_options(p, device=device, viewport=viewport)
            browser = await p.chromium.launch(headless=headless)
            try:
                await capture_page(
                    browser,
                    baseline_url,
                    baseline_path,
                    context_options=context_options,
                    selector=selector,
                    wait_time_ms=wait_time_ms,
                )
                logger.info("baseline_captured", path=str(baseline_path))
                await capture_page(
                    browser,
                    compare_url,
                    compare_path,
                    context_options=context_options,
                    selector=selector,
                    wait_time_ms=wait_time_ms,
                )
                logger.info("comparison_captured", path=str(compare_path))
            finally:
                await browser.close()

        result = compare_images(baseline_path, compare_path, diff_path, threshold)
        logger.info(
            "visual_diff_completed",
            identical=result.identical,
            diff_pixels=result.diff_pixels,
            diff_percentage=round(result.diff_percentage, 2),
        )

        report = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "baselineUrl": baseline_url,
            "compareUrl": compare_url,
            "threshold": threshold,
            "deviceType": device,
            "viewportSize": viewport,
            "selector": selector,
            "result": {
                "identical": result.identical,
                "diffPixels": result.diff_pixels,
                "diffPercentage": result.diff_percentage,
                "totalPixels": result.total_pixels,
            },
            "files": {
                "baseline": str(baseline_path),
                "compare": str(compare_path),
                "diff": str(diff_path),
                "report": str(report_path),
            },
        }
        write_json(report_path, report)
        return report
    finally:
        clear_request_context()
