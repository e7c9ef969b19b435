#!/usr/bin/env python3
"""
Measure page load performance over several runs.

Usage: python run_performance.py URL [--runs N] [--device NAME] [--throttling slow3G|fast3G]
"""

import argparse
import asyncio

from playwright.async_api import Error as PlaywrightError

from scraper.cli import bootstrap, console, fail, render_table, require_url
from scraper.storage import tool_output_dir
from scraper.tools.performance import DEFAULT_RUNS, THROTTLING_PRESETS, run_performance_test


async def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Measure page load performance")
    parser.add_argument("url", help="Page URL")
    parser.add_argument("--runs", type=int, default=DEFAULT_RUNS, help="Number of measured loads")
    parser.add_argument("--device", help="Playwright device name, e.g. 'iPhone 13'")
    parser.add_argument("--throttling", choices=sorted(THROTTLING_PRESETS), help="Network preset")
    args = parser.parse_args()

    config = bootstrap()
    url = require_url(args.url)

    try:
        results = await run_performance_test(
            url,
            output_dir=tool_output_dir(config.results_dir, "performance"),
            runs=args.runs,
            device=args.device,
            throttling=args.throttling,
            headless=config.headless,
        )
    except (ValueError, PlaywrightError) as e:
        fail(str(e))

    averages = results["averages"]
    timings = averages["timings"]
    render_table(
        f"Performance averages over {len(results['runs'])} run(s)",
        ["Metric", "Value"],
        [
            ("Load time", f"{averages['loadTime']:.0f} ms"),
            ("Time to first byte", f"{timings.get('timeToFirstByte', 0):.0f} ms"),
            ("DOM content loaded", f"{timings.get('domContentLoaded', 0):.0f} ms"),
            ("DOM complete", f"{timings.get('domComplete', 0):.0f} ms"),
            ("First paint", f"{timings.get('firstPaint', 0):.0f} ms"),
            ("First contentful paint", f"{timings.get('firstContentfulPaint', 0):.0f} ms"),
            ("Resources", f"{averages['resourceCount']:.0f}"),
            ("Resource size", f"{averages['resourceSize'] / 1024:.1f} KiB"),
        ],
    )
    console.print(f"Rating: [bold]{results['rating']}[/bold]")
    for suggestion in results["suggestions"]:
        console.print(f"  - {suggestion}")
    console.print(f"[green]Results saved:[/green] {results['file']}")


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
