#!/usr/bin/env python3
"""
Capture a screenshot of a URL (full page, viewport or one element).

Usage: python run_screenshot.py URL [--selector S] [--viewport-only] [--wait-time MS] [--device NAME] [--width W --height H]
"""

import argparse
import asyncio

from playwright.async_api import Error as PlaywrightError

from scraper.cli import add_viewport_args, bootstrap, console, fail, parse_viewport, require_url
from scraper.storage import tool_output_dir
from scraper.tools.screenshot import DEFAULT_WAIT_TIME_MS, ElementNotFoundError, capture_screenshot


async def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Capture a page screenshot")
    parser.add_argument("url", help="Page URL")
    parser.add_argument("--selector", help="Screenshot only the first element matching this selector")
    parser.add_argument("--viewport-only", action="store_true", help="Capture the viewport instead of the full page")
    parser.add_argument("--wait-time", type=int, default=DEFAULT_WAIT_TIME_MS, help="Wait after load, ms")
    add_viewport_args(parser)
    args = parser.parse_args()

    config = bootstrap()
    url = require_url(args.url)
    try:
        viewport = parse_viewport(args.width, args.height)
    except ValueError as e:
        fail(str(e))

    try:
        path = await capture_screenshot(
            url,
            output_dir=tool_output_dir(config.results_dir, "screenshots"),
            full_page=not args.viewport_only,
            selector=args.selector,
            wait_time_ms=args.wait_time,
            device=args.device,
            viewport=viewport,
            headless=config.headless,
        )
    except (ElementNotFoundError, ValueError, PlaywrightError) as e:
        fail(str(e))

    console.print(f"[green]Screenshot saved:[/green] {path}")


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
