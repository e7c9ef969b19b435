#!/usr/bin/env python3
"""
Capture the XHR/fetch traffic of a page and summarize it.

Usage: python run_request_monitor.py URL [WAIT_MS]
"""

import argparse
import asyncio

from playwright.async_api import Error as PlaywrightError

from scraper.cli import bootstrap, console, fail, render_table, require_url
from scraper.storage import tool_output_dir
from scraper.tools.request_monitor import (
    DEFAULT_WAIT_TIME_MS,
    monitor_requests,
    summarize_by_status,
    summarize_by_type,
)


async def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Capture AJAX requests of a page")
    parser.add_argument("url", help="Page URL")
    parser.add_argument(
        "wait_ms",
        nargs="?",
        type=int,
        default=DEFAULT_WAIT_TIME_MS,
        help="How long to keep capturing after DOMContentLoaded, ms",
    )
    args = parser.parse_args()

    config = bootstrap()
    url = require_url(args.url)
    if args.wait_ms < 0:
        fail("WAIT_MS must not be negative")

    try:
        result = await monitor_requests(
            url,
            output_dir=tool_output_dir(config.results_dir, "requests"),
            wait_time_ms=args.wait_ms,
            headless=config.headless,
        )
    except PlaywrightError as e:
        fail(str(e))

    data = result.data
    console.print(
        f"Captured [bold]{data['totalRequests']}[/bold] requests, "
        f"[bold]{data['totalResponses']}[/bold] responses"
    )
    render_table("By resource type", ["Type", "Count", "%"], summarize_by_type(data))
    render_table("By status", ["Status", "Count", "%"], summarize_by_status(data))
    console.print(f"[green]Data saved:[/green] {result.path}")


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
