#!/usr/bin/env python3
"""
Scrape the configured product sites and write results/<site>[-n].json.

Usage: python run_scrape.py [--site NAME ...] [--config PATH] [--results-dir DIR] [--no-headless] [--list]
"""

import argparse
import asyncio
import dataclasses
import sys

from scraper.cli import bootstrap, console, fail, render_table
from scraper.runner import run_sites
from scraper.sites import SiteConfigError, load_site_table


async def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Scrape configured product sites")
    parser.add_argument(
        "--site",
        action="append",
        dest="sites",
        metavar="NAME",
        help="Site to scrape (repeatable). Default: every site not on the ignore list.",
    )
    parser.add_argument("--config", help="JSON site table replacing the built-in one")
    parser.add_argument("--results-dir", help="Output directory (default: RESULTS_DIR or ./results)")
    parser.add_argument(
        "--no-headless",
        action="store_true",
        help="Show browser window. Use for local debugging.",
    )
    parser.add_argument("--list", action="store_true", help="List configured sites and exit")
    args = parser.parse_args()

    config = bootstrap()
    overrides = {}
    if args.config:
        overrides["sites_config_path"] = args.config
    if args.results_dir:
        overrides["results_dir"] = args.results_dir
    if args.no_headless:
        overrides["headless"] = False
    if overrides:
        config = dataclasses.replace(config, **overrides)

    try:
        table = load_site_table(config.sites_config_path)
    except (ValueError, FileNotFoundError) as e:
        fail(str(e))

    if args.list:
        render_table(
            "Configured sites",
            ["Site", "Type", "URL", "Pagination", "Ignored"],
            [
                (
                    name,
                    site.type,
                    site.url,
                    "yes" if site.pagination.enabled else "no",
                    "yes" if name in table.ignore_list else "no",
                )
                for name, site in table.sites.items()
            ],
        )
        return

    try:
        summaries = await run_sites(table, config=config, names=args.sites)
    except SiteConfigError as e:
        fail(str(e))

    if not summaries:
        console.print("[yellow]No sites selected.[/yellow]")
        return

    render_table(
        "Scrape results",
        ["Site", "Status", "Records", "Files", "Error"],
        [
            (
                s.site,
                s.status,
                s.record_count,
                ", ".join(str(path) for path in s.files) or "-",
                s.error or "",
            )
            for s in summaries
        ],
    )

    if all(s.status == "failed" for s in summaries):
        sys.exit(1)


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
