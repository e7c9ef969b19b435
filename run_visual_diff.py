#!/usr/bin/env python3
"""
Screenshot two URLs and report the pixel difference between them.

Usage: python run_visual_diff.py BASELINE COMPARE [--threshold T] [--selector S] [--wait-time MS] [--device NAME] [--width W --height H]
"""

import argparse
import asyncio

from playwright.async_api import Error as PlaywrightError

from scraper.cli import add_viewport_args, bootstrap, console, fail, parse_viewport, require_url
from scraper.storage import tool_output_dir
from scraper.tools.screenshot import DEFAULT_WAIT_TIME_MS, ElementNotFoundError
from scraper.tools.visual_diff import DEFAULT_THRESHOLD, visual_regression_test


async def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Visual regression between two URLs")
    parser.add_argument("baseline", help="Baseline page URL")
    parser.add_argument("compare", help="Page URL to compare against the baseline")
    parser.add_argument("--threshold", type=float, default=DEFAULT_THRESHOLD, help="Per-pixel threshold 0..1")
    parser.add_argument("--selector", help="Compare only the first element matching this selector")
    parser.add_argument("--wait-time", type=int, default=DEFAULT_WAIT_TIME_MS, help="Wait after load, ms")
    add_viewport_args(parser)
    args = parser.parse_args()

    config = bootstrap()
    baseline_url = require_url(args.baseline)
    compare_url = require_url(args.compare)
    try:
        viewport = parse_viewport(args.width, args.height)
    except ValueError as e:
        fail(str(e))

    try:
        report = await visual_regression_test(
            baseline_url,
            compare_url,
            output_dir=tool_output_dir(config.results_dir, "visual-regression"),
            threshold=args.threshold,
            selector=args.selector,
            wait_time_ms=args.wait_time,
            device=args.device,
            viewport=viewport,
            headless=config.headless,
        )
    except (ElementNotFoundError, ValueError, PlaywrightError) as e:
        fail(str(e))

    result = report["result"]
    if result["identical"]:
        console.print("[green]Images are identical.[/green]")
    else:
        console.print(
            f"[yellow]{result['diffPixels']} of {result['totalPixels']} pixels differ "
            f"({result['diffPercentage']:.2f}%).[/yellow]"
        )
    render_table("Output files", ["Kind", "Path"], report["files"].items())


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
